import typing as t

import structlog
from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from django.http import HttpRequest
from ninja_jwt.authentication import JWTAuth

logger = structlog.get_logger(__name__)


class FelicityJWTAuth(JWTAuth):
    """JWT authentication that binds the authenticated user to the log context.

    Every log line emitted while serving the request carries ``user_id`` and ``role``.
    """

    def authenticate(self, request: HttpRequest, token: str) -> t.Any:
        """Authenticate the request and bind the caller to structlog's contextvars.

        Raises:
            AuthenticationFailed: If authentication fails
            InvalidToken: If the token is invalid
        """
        user = super().authenticate(request, token)
        if user:
            structlog.contextvars.bind_contextvars(user_id=str(user.pk), role=getattr(user, "role", None))
        return user


class OptionalAuth(FelicityJWTAuth):
    """Optional JWT authentication.

    Allows endpoints to work with or without authentication:
    - If JWT token present: authenticates the user
    - If no JWT token: sets request.user to AnonymousUser and continues
    """

    def __call__(self, request: HttpRequest) -> t.Any | None:
        """Overrides FelicityJWTAuth __call__ to provide optional auth."""
        headers = request.headers
        auth_value = headers.get(self.header)
        if not auth_value:
            request.user = AnonymousUser()
            return request.user
        parts = auth_value.split(" ")

        if parts[0].lower() != self.openapi_scheme:
            if settings.DEBUG:
                logger.error("unexpected_auth_header", auth_scheme=parts[0])
            return None
        token = " ".join(parts[1:])
        return self.authenticate(request, token)
