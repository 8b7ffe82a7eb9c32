"""Registration eligibility gates.

Each gate performs one check and returns the error that blocks registration, or None to let
the next gate run. Capacity and duplicate gates are advisory only; the store enforces both.
"""

from __future__ import annotations

import abc
import typing as t
from enum import StrEnum
from uuid import UUID

from django.utils import timezone
from django.utils.translation import gettext as _
from django.utils.translation import gettext_noop
from pydantic import BaseModel

from accounts import roles
from accounts.models import FelicityUser
from events.exceptions import (
    AlreadyRegisteredError,
    DeadlinePassedError,
    EngineError,
    ForbiddenError,
    InvalidStateError,
    RegistrationLimitReachedError,
)
from events.models import Event, Registration


class Reasons(StrEnum):
    """Reasons why a participant cannot register.

    Note: Strings are marked with gettext_noop() for translation extraction.
    """

    PARTICIPANTS_ONLY = gettext_noop("Only participants can register for events.")
    EVENT_NOT_OPEN = gettext_noop("Registrations are not open for this event.")
    DEADLINE_PASSED = gettext_noop("The registration deadline has passed.")
    IIIT_ONLY = gettext_noop("This event is open to IIIT participants only.")
    NON_IIIT_ONLY = gettext_noop("This event is open to non-IIIT participants only.")
    LIMIT_REACHED = gettext_noop("Registration limit reached.")
    ALREADY_REGISTERED = gettext_noop("You are already registered for this event.")


class RegistrationEligibility(BaseModel):
    """Result of an eligibility check for a participant on an event."""

    allowed: bool
    event_id: UUID
    reason: str | None = None
    code: str | None = None


class BaseEligibilityGate(abc.ABC):
    """Abstract Base Class for a composable eligibility check."""

    def __init__(self, handler: EligibilityService) -> None:
        self.handler = handler
        self.participant: FelicityUser = handler.participant
        self.event: Event = handler.event

    @abc.abstractmethod
    def check(self) -> EngineError | None:
        """Returns the blocking error, or None to continue to the next gate."""


class RoleGate(BaseEligibilityGate):
    def check(self) -> EngineError | None:
        if not roles.can_register(self.participant):
            return ForbiddenError(_(Reasons.PARTICIPANTS_ONLY))
        return None


class EventOpenGate(BaseEligibilityGate):
    def check(self) -> EngineError | None:
        if self.event.status not in Event.REGISTRATION_OPEN_STATUSES:
            return InvalidStateError(_(Reasons.EVENT_NOT_OPEN), status=self.event.status)
        return None


class DeadlineGate(BaseEligibilityGate):
    def check(self) -> EngineError | None:
        deadline = self.event.registration_deadline
        if deadline is not None and self.handler.now > deadline:
            return DeadlinePassedError(_(Reasons.DEADLINE_PASSED))
        return None


class ParticipantTypeGate(BaseEligibilityGate):
    """Gate on the participant subtype (IIIT / non-IIIT)."""

    def check(self) -> EngineError | None:
        participant_type = self.participant.participant_type
        if self.event.eligibility == Event.Eligibility.IIIT_ONLY and (
            participant_type != FelicityUser.ParticipantType.IIIT
        ):
            return ForbiddenError(_(Reasons.IIIT_ONLY))
        if self.event.eligibility == Event.Eligibility.NON_IIIT_ONLY and (
            participant_type != FelicityUser.ParticipantType.NON_IIIT
        ):
            return ForbiddenError(_(Reasons.NON_IIIT_ONLY))
        return None


class CapacityGate(BaseEligibilityGate):
    def check(self) -> EngineError | None:
        if not self.event.has_capacity:
            return RegistrationLimitReachedError(_(Reasons.LIMIT_REACHED), limit=self.event.registration_limit)
        return None


class DuplicateGate(BaseEligibilityGate):
    def check(self) -> EngineError | None:
        if Registration.objects.filter(participant=self.participant, event=self.event).exists():
            return AlreadyRegisteredError(_(Reasons.ALREADY_REGISTERED))
        return None


class EligibilityService:
    """Runs the gates in order and reports the first one that blocks."""

    GATES: t.ClassVar[list[type[BaseEligibilityGate]]] = [
        RoleGate,
        EventOpenGate,
        DeadlineGate,
        ParticipantTypeGate,
        CapacityGate,
        DuplicateGate,
    ]

    def __init__(self, participant: FelicityUser, event: Event, now: t.Any = None) -> None:
        self.participant = participant
        self.event = event
        self.now = now or timezone.now()

    def first_blocker(self) -> EngineError | None:
        for gate_cls in self.GATES:
            error = gate_cls(self).check()
            if error is not None:
                return error
        return None

    def check(self) -> RegistrationEligibility:
        error = self.first_blocker()
        if error is None:
            return RegistrationEligibility(allowed=True, event_id=self.event.pk)
        return RegistrationEligibility(allowed=False, event_id=self.event.pk, reason=error.message, code=error.code)

    def ensure(self) -> None:
        error = self.first_blocker()
        if error is not None:
            raise error
