"""Errors raised by the registration and fulfillment engine.

Every business-rule violation is an ``EngineError`` with a stable ``code`` and the HTTP status
the api layer answers with. ``TransientStoreError`` is the only retryable class.
"""

import typing as t


class EngineError(Exception):
    """Base class for expected business-rule rejections."""

    code: str = "engine_error"
    status_code: int = 400
    default_message: str = "The operation could not be completed."

    def __init__(self, message: str | None = None, **context: t.Any) -> None:
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)


class NotFoundError(EngineError):
    code = "not_found"
    status_code = 404
    default_message = "Not found."


class EventNotFoundError(NotFoundError):
    code = "event_not_found"
    default_message = "Event not found."


class RegistrationNotFoundError(NotFoundError):
    code = "registration_not_found"
    default_message = "Registration not found."


class ItemNotFoundError(NotFoundError):
    code = "item_not_found"
    default_message = "Merchandise item not found."


class TicketNotFoundError(NotFoundError):
    code = "ticket_not_found"
    default_message = "Ticket not found."


class InvalidStateError(EngineError):
    code = "invalid_state"
    status_code = 409
    default_message = "The operation is not valid in the current state."


class InsufficientStockError(EngineError):
    code = "insufficient_stock"
    status_code = 409
    default_message = "Not enough stock available."


class RegistrationLimitReachedError(EngineError):
    code = "registration_limit_reached"
    status_code = 409
    default_message = "Registration limit reached."


class AlreadyRegisteredError(EngineError):
    code = "already_registered"
    status_code = 409
    default_message = "You are already registered for this event."


class AlreadyTicketedError(EngineError):
    code = "already_ticketed"
    status_code = 409
    default_message = "A ticket has already been issued for this registration."


class ValidationFailedError(EngineError):
    code = "validation_failed"
    status_code = 400
    default_message = "Validation failed."

    def __init__(self, message: str | None = None, errors: dict[str, list[str]] | None = None, **context: t.Any):
        super().__init__(message, **context)
        self.errors = errors or {}


class WrongEventError(ValidationFailedError):
    code = "wrong_event"
    default_message = "This ticket belongs to a different event."


class ForbiddenError(EngineError):
    code = "forbidden"
    status_code = 403
    default_message = "You are not allowed to perform this action."


class DeadlinePassedError(EngineError):
    code = "deadline_passed"
    status_code = 400
    default_message = "The registration deadline has passed."


class TransientStoreError(EngineError):
    """The store could not complete the operation; retrying is safe."""

    code = "transient_store_error"
    status_code = 503
    default_message = "Temporarily unavailable, please retry."
