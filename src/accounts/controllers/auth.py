"""Token endpoints."""

from ninja_extra import api_controller
from ninja_jwt.controller import TokenObtainPairController

from common.throttling import AuthThrottle


@api_controller("/auth", tags=["Auth"], throttle=AuthThrottle())
class AuthController(TokenObtainPairController):
    """Obtain a JWT access/refresh pair with username and password, and refresh it."""
