"""Exception handlers for the API."""

import typing as t
from copy import deepcopy

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import InterfaceError, OperationalError
from django.http import HttpRequest
from ninja.responses import Response

from events.exceptions import EngineError, ValidationFailedError

logger = structlog.get_logger(__name__)


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Handle a general exception.

    Args:
        request: The incoming HTTP request.
        exc: The exception.

    Returns:
        The response.
    """
    logger.exception(
        "internal_server_error",
        method=request.method,
        path=request.path,
        headers=obfuscate(dict(request.headers)),
    )
    data = {"code": "internal_error", "detail": "Internal Server Error."}
    if settings.DEBUG:  # pragma: no cover
        data["exception"] = repr(exc)
    return Response(status=500, data=data)


def handle_engine_error(request: HttpRequest, exc: EngineError | t.Type[EngineError]) -> Response:
    """Map a business-rule rejection to its status code."""
    assert isinstance(exc, EngineError)
    data: dict[str, t.Any] = {"code": exc.code, "detail": exc.message}
    if isinstance(exc, ValidationFailedError) and exc.errors:
        data["errors"] = exc.errors
    logger.info("engine_error", code=exc.code, status=exc.status_code, path=request.path, context=exc.context)
    return Response(status=exc.status_code, data=data)


def handle_transient_db_error(
    request: HttpRequest, exc: OperationalError | InterfaceError | t.Type[OperationalError]
) -> Response:
    """The database could not complete the operation. Callers may retry."""
    logger.warning("transient_store_error", path=request.path, error=str(exc))
    return Response(
        status=503,
        data={"code": "transient_store_error", "detail": "Temporarily unavailable, please retry.", "retryable": True},
    )


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Handle a validation error.

    Args:
        request: The incoming HTTP request.
        exc: The exception.
    """
    assert isinstance(exc, ValidationError)
    logger.info("validation_error", path=request.path)
    if hasattr(exc, "error_dict"):
        errors = {k: [m for e in v for m in e.messages] for k, v in exc.error_dict.items()}
    else:
        errors = {"__all__": list(exc.messages)}
    return Response(status=400, data={"code": "validation_failed", "detail": "Validation failed.", "errors": errors})


SENSITIVE_KEYS = {"password", "token", "x-api-key", "authorization", "authentication", "cookie"}


def obfuscate(data: dict[str, t.Any]) -> dict[str, t.Any]:
    """Obfuscate sensitive data in payloads and headers."""
    new_data = deepcopy(data)
    for key in data.keys():
        if key.lower() in SENSITIVE_KEYS:
            new_data[key] = "********"
    return new_data
