"""Service layer for the accounts app."""

import structlog
from django.utils.translation import gettext_lazy as _
from ninja.errors import HttpError

from accounts import schema
from accounts.models import FelicityUser

logger = structlog.get_logger(__name__)


def register_participant(payload: schema.ParticipantSignupSchema) -> FelicityUser:
    """Create a participant account.

    Organizer accounts are provisioned by admins and cannot be created here.
    """
    logger.info("participant_registration_started", email=payload.email)
    if FelicityUser.objects.filter(username=payload.email).exists():
        logger.warning("participant_registration_duplicate", email=payload.email)
        raise HttpError(400, str(_("A user with this email already exists.")))
    user = FelicityUser.objects.create_user(
        username=payload.email,
        email=payload.email,
        password=payload.password1,
        first_name=payload.first_name,
        last_name=payload.last_name,
        role=FelicityUser.Role.PARTICIPANT,
        participant_type=payload.participant_type,
        college_name=payload.college_name,
        contact_number=payload.contact_number or None,
    )
    logger.info("participant_registration_completed", user_id=str(user.id))
    return user
