"""Custom Django password validators."""

import re

from django.contrib.auth.password_validation import validate_password as _default_validate_password
from django.core.exceptions import ValidationError
from django.utils.translation import gettext as _
from ninja.errors import HttpError

from accounts.models import FelicityUser


def validate_password(password: str, user: FelicityUser | None = None) -> None:
    """Simple wrapper around Django's password validation."""
    try:
        _default_validate_password(password, user=user)
    except ValidationError as e:
        raise HttpError(400, e.messages[0])


class ComplexPasswordValidator:
    """Require a mix of letter cases and digits."""

    def __init__(self, min_length: int = 8) -> None:
        self.min_length = min_length

    def validate(self, password: str, user: FelicityUser | None = None) -> None:
        if len(password) < self.min_length:
            raise ValidationError(
                _("Password must be at least %(min_length)d characters long.") % {"min_length": self.min_length},
                code="password_too_short",
            )
        if not re.search(r"[A-Z]", password) or not re.search(r"[a-z]", password):
            raise ValidationError(
                _("Password must contain both uppercase and lowercase letters."),
                code="password_mixed_case",
            )
        if not re.search(r"\d", password):
            raise ValidationError(_("Password must contain at least one digit."), code="password_no_digit")

    def get_help_text(self) -> str:
        return _(
            "Your password must be at least %(min_length)d characters long and contain uppercase and "
            "lowercase letters and a digit."
        ) % {"min_length": self.min_length}
