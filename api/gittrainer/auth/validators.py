"""Validation utilities for user input.

Provides validation for:
- Usernames
- Password strength
"""

import re
from typing import NamedTuple


USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
USERNAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_.-]*$")

PASSWORD_MIN_LENGTH = 8


class ValidationResult(NamedTuple):
    """Result of a validation check."""

    valid: bool
    message: str | None = None
    formatted: str | None = None


def normalize_username(username: str) -> str:
    """Usernames are case-insensitive and stored lower-cased.

    Example:
        >>> normalize_username("  OctoCat ")
        'octocat'
    """
    return username.strip().lower()


def validate_username(username: str) -> ValidationResult:
    """Validate a username.

    Rules: 3-30 characters, starts with a letter or digit, then letters,
    digits, ``_``, ``.`` or ``-``.

    Examples:
        >>> validate_username("Linus_T")
        ValidationResult(valid=True, message=None, formatted='linus_t')
        >>> validate_username("x")
        ValidationResult(valid=False, message='Username must be 3-30 characters', formatted=None)
    """
    normalized = normalize_username(username)

    if not USERNAME_MIN_LENGTH <= len(normalized) <= USERNAME_MAX_LENGTH:
        return ValidationResult(
            False,
            f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters",
        )

    if not USERNAME_PATTERN.match(normalized):
        return ValidationResult(
            False,
            "Username may only contain letters, digits, '_', '.' and '-'",
        )

    return ValidationResult(True, formatted=normalized)


def validate_password(password: str) -> ValidationResult:
    """Validate password strength.

    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character

    Examples:
        >>> validate_password("Abc123!@")
        ValidationResult(valid=True, message=None, formatted=None)
        >>> validate_password("weak")
        ValidationResult(valid=False, message='Password must be at least 8 characters', formatted=None)
    """
    if len(password) < PASSWORD_MIN_LENGTH:
        return ValidationResult(
            False, f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
        )

    if not re.search(r"[A-Z]", password):
        return ValidationResult(False, "Password needs an uppercase letter")

    if not re.search(r"[a-z]", password):
        return ValidationResult(False, "Password needs a lowercase letter")

    if not re.search(r"\d", password):
        return ValidationResult(False, "Password needs a digit")

    if not re.search(r"[!@#$%^&*(),.?\":{}|<>_\-]", password):
        return ValidationResult(False, "Password needs a special character")

    return ValidationResult(True)
