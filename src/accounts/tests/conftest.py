import typing as t

import pytest


@pytest.fixture
def signup_payload() -> dict[str, t.Any]:
    """A valid IIIT participant signup."""
    return {
        "email": "Ananya.Rao@students.iiit.ac.in",
        "password1": "Sunrise-Over-Campus-42",
        "password2": "Sunrise-Over-Campus-42",
        "first_name": "Ananya",
        "last_name": "Rao",
        "participant_type": "iiit",
        "college_name": "IIIT Hyderabad",
        "contact_number": "+91 98765 43210",
    }
