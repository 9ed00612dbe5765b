from utils.throttle import LoginThrottle


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_blocks_after_max_failures():
    clock = FakeClock()
    throttle = LoginThrottle(max_attempts=2, window_seconds=60, clock=clock)
    key = ("user@example.com", "127.0.0.1")

    throttle.record_failure(key)
    assert throttle.retry_after(key) == 0
    throttle.record_failure(key)
    assert throttle.retry_after(key) == 60

    clock.now += 45
    assert throttle.retry_after(key) == 15


def test_window_expiry_unblocks():
    clock = FakeClock()
    throttle = LoginThrottle(max_attempts=2, window_seconds=60, clock=clock)
    key = ("user@example.com", "127.0.0.1")

    throttle.record_failure(key)
    clock.now += 30
    throttle.record_failure(key)
    assert throttle.retry_after(key) > 0

    # The first failure falls out of the window
    clock.now += 31
    assert throttle.retry_after(key) == 0


def test_keys_are_independent_and_reset():
    throttle = LoginThrottle(max_attempts=1, window_seconds=60, clock=FakeClock())

    throttle.record_failure("a")
    assert throttle.retry_after("a") > 0
    assert throttle.retry_after("b") == 0

    throttle.reset("a")
    assert throttle.retry_after("a") == 0


def test_disabled_throttle():
    throttle = LoginThrottle(max_attempts=0, window_seconds=60, clock=FakeClock())

    for _ in range(10):
        throttle.record_failure("a")
    assert throttle.retry_after("a") == 0


def test_expired_keys_are_swept():
    clock = FakeClock()
    throttle = LoginThrottle(max_attempts=5, window_seconds=60, clock=clock, sweep_threshold=100)

    for i in range(10_000):
        throttle.record_failure((f"user{i}@example.com", "10.0.0.1"))
    assert len(throttle) == 10_000

    clock.now += 3600
    throttle.record_failure(("fresh@example.com", "10.0.0.1"))

    assert len(throttle) == 1
    assert throttle.retry_after(("user0@example.com", "10.0.0.1")) == 0


def test_sweep_keeps_keys_inside_the_window():
    clock = FakeClock()
    throttle = LoginThrottle(max_attempts=2, window_seconds=60, clock=clock, sweep_threshold=2)

    throttle.record_failure("old")
    clock.now += 50
    throttle.record_failure("recent")
    clock.now += 20
    # Map is at the threshold, "old" is 70s old and "recent" 20s
    throttle.record_failure("recent")
    throttle.record_failure("new")

    assert len(throttle) == 2
    assert throttle.retry_after("recent") > 0
