import pytest
from django.core.exceptions import ValidationError

from accounts.validators import normalize_phone_number, validate_phone_number


def test_validate_phone_number_not_string() -> None:
    with pytest.raises(ValidationError, match="Phone number must be a string."):
        validate_phone_number(123)  # type: ignore[arg-type]


def test_validate_phone_number_invalid() -> None:
    with pytest.raises(ValidationError, match="Number format is incorrect."):
        validate_phone_number("123")


def test_validate_phone_number_valid() -> None:
    validate_phone_number("+91 98765-43210")


def test_validate_phone_number_none() -> None:
    validate_phone_number(None)


def test_normalize_phone_number() -> None:
    assert normalize_phone_number("+91 (987) 654-3210") == "+919876543210"
