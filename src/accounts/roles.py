"""Role predicates.

Roles are a closed set (participant, organizer, admin). Every operation that
behaves differently per role asks one of these predicates instead of probing
user attributes ad hoc.
"""

import typing as t

from accounts.models import FelicityUser

if t.TYPE_CHECKING:
    from events.models import Event, Registration


def is_participant(user: FelicityUser) -> bool:
    return user.role == FelicityUser.Role.PARTICIPANT


def is_organizer(user: FelicityUser) -> bool:
    return user.role == FelicityUser.Role.ORGANIZER


def is_admin(user: FelicityUser) -> bool:
    return user.role == FelicityUser.Role.ADMIN or user.is_superuser


def can_manage_event(user: FelicityUser, event: "Event") -> bool:
    """Only the owning organizer may manage an event."""
    return is_organizer(user) and event.organizer_id == user.id


def can_register(user: FelicityUser) -> bool:
    return is_participant(user)


def owns_registration(user: FelicityUser, registration: "Registration") -> bool:
    return registration.participant_id == user.id


def can_view_ticket(user: FelicityUser, registration: "Registration") -> bool:
    """The registrant and the owning organizer may look a ticket up."""
    return owns_registration(user, registration) or can_manage_event(user, registration.event)
