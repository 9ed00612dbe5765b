"""In-process throttle for failed login attempts.

Failures are counted per key (email and client address) inside a sliding
window. State lives in memory, so each worker process throttles on its own.
Keys whose failures have all left the window are swept out once the map
grows past a size threshold (doubled after each sweep) or a full window has
passed since the last sweep, so each failure costs amortized constant time.

Checking a key and recording a failure take the lock separately, so
concurrent bad logins for one key can all pass the check before any of them
is recorded and overshoot ``max_attempts`` by the number of requests in
flight.
"""
import threading
import time
from collections import defaultdict, deque

SWEEP_THRESHOLD = 1024


class LoginThrottle:
    def __init__(self, max_attempts: int, window_seconds: float, clock=time.monotonic,
                 sweep_threshold: int = SWEEP_THRESHOLD):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.sweep_threshold = sweep_threshold
        self._clock = clock
        self._failures = defaultdict(deque)
        self._next_sweep = sweep_threshold
        self._last_sweep = clock()
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.max_attempts > 0

    def __len__(self):
        return len(self._failures)

    def _prune(self, key, now):
        attempts = self._failures.get(key)
        if attempts is None:
            return None
        while attempts and now - attempts[0] >= self.window_seconds:
            attempts.popleft()
        if not attempts:
            del self._failures[key]
            return None
        return attempts

    def _sweep(self, now):
        # Newest attempt sits at the right end of each deque
        stale = [key for key, attempts in self._failures.items()
                 if not attempts or now - attempts[-1] >= self.window_seconds]
        for key in stale:
            del self._failures[key]

    def retry_after(self, key) -> float:
        """Seconds until ``key`` may try again, 0 when it is not blocked."""
        if not self.enabled:
            return 0
        with self._lock:
            now = self._clock()
            attempts = self._prune(key, now)
            if attempts is None or len(attempts) < self.max_attempts:
                return 0
            return max(0.0, self.window_seconds - (now - attempts[0]))

    def record_failure(self, key):
        if not self.enabled:
            return
        with self._lock:
            now = self._clock()
            if len(self._failures) >= self._next_sweep or now - self._last_sweep >= self.window_seconds:
                self._sweep(now)
                self._last_sweep = now
                self._next_sweep = max(self.sweep_threshold, 2 * len(self._failures))
            self._prune(key, now)
            self._failures[key].append(now)

    def reset(self, key):
        with self._lock:
            self._failures.pop(key, None)
