"""Field validation for user create/update payloads."""

from typing import NamedTuple

from email_validator import EmailNotValidError, validate_email

NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 256


class FieldError(NamedTuple):
    """A single field violation."""

    field: str
    message: str


def _check_name(field: str, value: str | None) -> list[FieldError]:
    if not value:
        return [FieldError(field, f"{field} is required.")]
    if len(value) > NAME_MAX_LENGTH:
        return [FieldError(field, f"{field} must be at most {NAME_MAX_LENGTH} characters.")]
    return []


def _check_email(value: str | None) -> list[FieldError]:
    if not value:
        return [FieldError("email", "email is required.")]

    errors: list[FieldError] = []
    try:
        validate_email(value, check_deliverability=False, globally_deliverable=False, test_environment=True)
    except EmailNotValidError:
        errors.append(FieldError("email", "email is not a valid email address."))
    if len(value) > EMAIL_MAX_LENGTH:
        errors.append(FieldError("email", f"email must be at most {EMAIL_MAX_LENGTH} characters."))
    return errors


def validate_user_fields(first_name: str | None, last_name: str | None, email: str | None) -> list[FieldError]:
    """Validate the writable user fields.

    Names only need to be non-empty strings; whitespace is not trimmed.

    Args:
        first_name: Given name
        last_name: Family name
        email: Email address

    Returns:
        List of field violations, empty when the input is valid
    """
    return [
        *_check_name("firstName", first_name),
        *_check_name("lastName", last_name),
        *_check_email(email),
    ]


def format_errors(errors: list[FieldError]) -> str:
    """Join violation messages into one human-readable message."""
    message = "; ".join(error.message for error in errors if error.message.strip()).strip()
    return message or "validation failed"
