"""
Validation utilities for request input.
"""
import re
from enum import Enum
from typing import Any, TypeVar

from ..models.enums import Role
from .error_handlers import ValidationError

E = TypeVar("E", bound=Enum)

_EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'

# Primary keys are signed 64-bit integers in every supported database.
MAX_ROW_ID = 2**63 - 1


def is_row_id(value: Any) -> bool:
    """True when value fits a stored primary key."""
    return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= MAX_ROW_ID


def validate_email(email: str) -> str:
    """Validate email format."""
    if not email or not isinstance(email, str):
        raise ValidationError("Email is required")

    email = email.strip().lower()
    if len(email) > 255:
        raise ValidationError("Email too long (max 255 characters)")

    if not re.match(_EMAIL_PATTERN, email):
        raise ValidationError("Invalid email format")

    return email


def validate_password(password: str) -> None:
    """Validate password strength."""
    if not password or not isinstance(password, str):
        raise ValidationError("Password is required")

    if len(password) < 6:
        raise ValidationError("Password must be at least 6 characters")

    if len(password) > 128:
        raise ValidationError("Password too long (max 128 characters)")


def validate_string_field(
    value: Any,
    field_name: str,
    max_length: int = 1000,
    required: bool = True,
) -> str | None:
    """Validate a string field with common rules."""
    if value is None:
        if required:
            raise ValidationError(f"{field_name} is required")
        return None

    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")

    value = value.strip()

    if required and not value:
        raise ValidationError(f"{field_name} cannot be empty")

    if len(value) > max_length:
        raise ValidationError(f"{field_name} must not exceed {max_length} characters")

    return value


def validate_string_list(value: Any, field_name: str) -> list[str]:
    """Accept a list of strings or a comma-separated string; drop blanks."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        raise ValidationError(f"{field_name} must be a list of strings")
    return [str(item).strip() for item in items if str(item).strip()]


def validate_choice(value: Any, enum_cls: type[E], field_name: str = "status") -> E:
    """Parse an untrusted string into a member of a closed enum."""
    if not value or not isinstance(value, str):
        raise ValidationError(f"{field_name.capitalize()} is required")
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {field_name}. Must be one of: {allowed}") from None


def validate_role(role: str) -> Role:
    """Validate user role."""
    return validate_choice(role, Role, "role")
