import pytest
from django.core.exceptions import ValidationError
from ninja.errors import HttpError

from accounts.password_validation import ComplexPasswordValidator, validate_password


@pytest.mark.parametrize(
    "password,code",
    [
        ("Ab1", "password_too_short"),
        ("alllowercase1", "password_mixed_case"),
        ("ALLUPPERCASE1", "password_mixed_case"),
        ("NoDigitsHere", "password_no_digit"),
    ],
)
def test_complex_validator_rejects(password: str, code: str) -> None:
    with pytest.raises(ValidationError) as exc_info:
        ComplexPasswordValidator().validate(password)
    assert exc_info.value.code == code


def test_complex_validator_accepts() -> None:
    ComplexPasswordValidator().validate("Sunrise-Over-Campus-42")


def test_help_text_mentions_length() -> None:
    assert "12" in ComplexPasswordValidator(min_length=12).get_help_text()


def test_validate_password_raises_http_error() -> None:
    with pytest.raises(HttpError) as exc_info:
        validate_password("password")
    assert exc_info.value.status_code == 400
