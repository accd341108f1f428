"""Tests for user field validation."""

import pytest
from user_store.validation import FieldError, format_errors, validate_user_fields


@pytest.mark.unit
def test_valid_fields_have_no_errors() -> None:
    assert validate_user_fields("Ana", "Li", "ana@x.com") == []


@pytest.mark.unit
def test_names_are_not_trimmed() -> None:
    """Whitespace-only names pass; only the empty string is rejected."""
    assert validate_user_fields(" ", " ", "ana@x.com") == []


@pytest.mark.unit
@pytest.mark.parametrize(
    ("first_name", "last_name", "email", "fields"),
    [
        ("", "Li", "ana@x.com", ["firstName"]),
        ("Ana", None, "ana@x.com", ["lastName"]),
        ("A" * 101, "Li", "ana@x.com", ["firstName"]),
        ("Ana", "L" * 101, "ana@x.com", ["lastName"]),
        ("Ana", "Li", "", ["email"]),
        ("Ana", "Li", "ana.x.com", ["email"]),
        ("Ana", "Li", "ana@", ["email"]),
        ("", "", "nope", ["firstName", "lastName", "email"]),
    ],
)
def test_invalid_fields(first_name, last_name, email, fields) -> None:
    errors = validate_user_fields(first_name, last_name, email)
    assert [error.field for error in errors] == fields


@pytest.mark.unit
@pytest.mark.parametrize("email", ["a@b", "ana@example.test", "ANA+tag@x.com"])
def test_syntactically_valid_emails_are_accepted(email: str) -> None:
    """Only syntax is checked; single-label and test domains are fine."""
    assert validate_user_fields("Ana", "Li", email) == []


@pytest.mark.unit
def test_length_limits_are_inclusive() -> None:
    assert validate_user_fields("A" * 100, "L" * 100, "ana@x.com") == []


@pytest.mark.unit
def test_overlong_email_is_rejected() -> None:
    email = "a" * 60 + "@" + ".".join(["b" * 60] * 4) + ".com"
    assert len(email) > 256

    errors = validate_user_fields("Ana", "Li", email)

    assert any("at most 256" in error.message for error in errors)


@pytest.mark.unit
def test_format_errors_joins_messages() -> None:
    errors = [FieldError("firstName", "firstName is required."), FieldError("email", "email is required.")]
    assert format_errors(errors) == "firstName is required.; email is required."


@pytest.mark.unit
def test_format_errors_falls_back_to_generic_message() -> None:
    assert format_errors([FieldError("email", "  ")]) == "validation failed"
