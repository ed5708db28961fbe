"""Server-side password policy checks."""

from __future__ import annotations

from olw.config.settings import get_settings
from olw.exceptions import ValidationError


class PasswordPolicyError(ValidationError):
    """Raised when a password does not satisfy policy requirements."""


def validate_password_policy(password: str) -> None:
    """Validate local password policy."""
    min_length = get_settings().AUTH_PASSWORD_MIN_LENGTH
    if len(password) < min_length:
        message = f"Password must be at least {min_length} characters"
        raise PasswordPolicyError(message)
