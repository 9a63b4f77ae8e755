"""
Credential validation.

Pure functions applied to credential input before any provider call.
No I/O and no state.
"""

import re

from .models import Rule, RuleViolation

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128
MAX_DISPLAY_NAME_LENGTH = 50

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,64}")

_MESSAGES = {
    Rule.INVALID_EMAIL: "Please enter a valid email address.",
    Rule.PASSWORD_TOO_SHORT: f"Password must be at least {MIN_PASSWORD_LENGTH} characters.",
    Rule.PASSWORD_TOO_LONG: f"Password must be at most {MAX_PASSWORD_LENGTH} characters.",
    Rule.PASSWORD_MISMATCH: "Passwords do not match.",
    Rule.PASSWORD_REJECTED: "Password does not meet the strength requirements.",
    Rule.DISPLAY_NAME_EMPTY: "Display name cannot be empty.",
    Rule.DISPLAY_NAME_TOO_LONG: (
        f"Display name must be at most {MAX_DISPLAY_NAME_LENGTH} characters."
    ),
}


def violation(rule: Rule, field: str) -> RuleViolation:
    """Build a violation with its standard message."""
    return RuleViolation(rule=rule, field=field, message=_MESSAGES[rule])


def validate_email(email: str) -> bool:
    """Check that the string has a local@domain.tld shape."""
    if not isinstance(email, str):
        return False
    return EMAIL_PATTERN.fullmatch(email) is not None


def validate_password(password: str) -> bool:
    """Check that the password length is within bounds."""
    if not isinstance(password, str):
        return False
    return MIN_PASSWORD_LENGTH <= len(password) <= MAX_PASSWORD_LENGTH


def validate_display_name(display_name: str) -> bool:
    """Check that the trimmed display name is non-empty and within bounds."""
    if not isinstance(display_name, str):
        return False
    return 1 <= len(display_name.strip()) <= MAX_DISPLAY_NAME_LENGTH


def check_email(email: str, field: str = "email") -> list[RuleViolation]:
    if validate_email(email):
        return []
    return [violation(Rule.INVALID_EMAIL, field)]


def check_password(password: str, field: str = "password") -> list[RuleViolation]:
    if validate_password(password):
        return []
    if isinstance(password, str) and len(password) > MAX_PASSWORD_LENGTH:
        return [violation(Rule.PASSWORD_TOO_LONG, field)]
    return [violation(Rule.PASSWORD_TOO_SHORT, field)]


def check_display_name(display_name: str, field: str = "display_name") -> list[RuleViolation]:
    if validate_display_name(display_name):
        return []
    if isinstance(display_name, str) and display_name.strip():
        return [violation(Rule.DISPLAY_NAME_TOO_LONG, field)]
    return [violation(Rule.DISPLAY_NAME_EMPTY, field)]


def validate_sign_in(email: str, password: str) -> list[RuleViolation]:
    """Rules checked before a password sign-in."""
    return check_email(email) + check_password(password)


def validate_registration(
    email: str,
    password: str,
    confirm_password: str,
    display_name: str,
) -> list[RuleViolation]:
    """
    Check every registration rule.

    All violations are returned, not just the first, so callers can decide
    how many to show.

    Returns:
        Violated rules in field order; empty when the input is valid
    """
    violations = check_email(email) + check_password(password)
    if password != confirm_password:
        violations.append(violation(Rule.PASSWORD_MISMATCH, "confirm_password"))
    violations.extend(check_display_name(display_name))
    return violations
