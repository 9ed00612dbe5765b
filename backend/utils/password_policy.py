# Password strength rules applied before an account is created
import re

MIN_LENGTH = 6
MAX_LENGTH = 16

_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"[0-9]")

POLICY_MESSAGE = (
    f"Password must contain {MIN_LENGTH} to {MAX_LENGTH} characters, "
    "upper and lowercase letters and digits."
)


def validate(password) -> bool:
    if not isinstance(password, str):
        return False
    if not MIN_LENGTH <= len(password) <= MAX_LENGTH:
        return False
    return all(rule.search(password) for rule in (_UPPER, _LOWER, _DIGIT))
