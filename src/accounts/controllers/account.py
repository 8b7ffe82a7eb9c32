"""Account endpoints."""

from ninja_extra import api_controller, route

from accounts import schema
from accounts.models import FelicityUser
from accounts.service import account as account_service
from common.authentication import FelicityJWTAuth
from common.controllers import UserAwareController
from common.throttling import AuthThrottle


@api_controller("/account", tags=["Account"], throttle=AuthThrottle())
class AccountController(UserAwareController):
    @route.post("/register", response={201: schema.FelicityUserSchema}, url_name="register-account")
    def register(self, payload: schema.ParticipantSignupSchema) -> tuple[int, FelicityUser]:
        """Sign up as a participant. Log in afterwards through POST /auth/pair."""
        return 201, account_service.register_participant(payload)

    @route.get("/me", response=schema.FelicityUserSchema, url_name="me", auth=FelicityJWTAuth())
    def me(self) -> FelicityUser:
        """The authenticated user's profile, including role and participant type."""
        return self.user()
