"""Validation of answers to an event's custom registration form."""

import math
import typing as t
from collections.abc import Sequence

from django.core.exceptions import ValidationError
from django.core.validators import validate_email

from accounts.validators import validate_phone_number
from events.exceptions import ValidationFailedError
from events.models import FormField

FieldType = FormField.FieldType


def _is_empty(answer: t.Any) -> bool:
    if answer is None:
        return True
    if isinstance(answer, str):
        return not answer.strip()
    if isinstance(answer, (list, tuple, dict)):
        return len(answer) == 0
    return False


def _as_number(answer: t.Any) -> float | None:
    if isinstance(answer, bool):
        return None
    try:
        value = float(str(answer).strip())
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _field_errors(form_field: FormField, answer: t.Any) -> list[str]:
    """Format and range checks. Applied whenever an answer is present, required or not."""
    field_type = form_field.field_type
    if field_type == FieldType.EMAIL:
        try:
            validate_email(answer.strip() if isinstance(answer, str) else "")
        except ValidationError:
            return ["Enter a valid email address."]
    elif field_type == FieldType.PHONE:
        try:
            validate_phone_number(answer.strip() if isinstance(answer, str) else answer)
        except ValidationError:
            return ["Enter a valid phone number."]
    elif field_type == FieldType.NUMBER:
        value = _as_number(answer)
        if value is None:
            return ["Enter a number."]
        if form_field.min_value is not None and value < form_field.min_value:
            return [f"Must be at least {form_field.min_value:g}."]
        if form_field.max_value is not None and value > form_field.max_value:
            return [f"Must be at most {form_field.max_value:g}."]
    elif field_type in (FieldType.DROPDOWN, FieldType.RADIO) and form_field.options:
        if answer not in form_field.options:
            return ["Choose one of the available options."]
    elif field_type == FieldType.CHECKBOX and form_field.options and isinstance(answer, list):
        if any(choice not in form_field.options for choice in answer):
            return ["Choose only from the available options."]
    return []


def validate_form_responses(
    form_fields: Sequence[FormField], responses: Sequence[dict[str, t.Any]] | None
) -> list[dict[str, t.Any]]:
    """Validate answers against the form definition.

    Returns:
        The answers to declared fields, in form order, as ``{"label", "answer"}`` items.

    Raises:
        ValidationFailedError: with one entry per offending field label.
    """
    answers = {str(r.get("label", "")): r.get("answer") for r in responses or []}
    errors: dict[str, list[str]] = {}
    cleaned: list[dict[str, t.Any]] = []
    for form_field in form_fields:
        answer = answers.get(form_field.label)
        if _is_empty(answer):
            if form_field.is_required:
                errors[form_field.label] = ["This field is required."]
            continue
        field_errors = _field_errors(form_field, answer)
        if field_errors:
            errors[form_field.label] = field_errors
            continue
        cleaned.append({"label": form_field.label, "answer": answer})
    if errors:
        raise ValidationFailedError("Please fix the highlighted form fields.", errors=errors)
    return cleaned
