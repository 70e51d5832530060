"""Authentication gate: accounts, sessions and the RequireSession dependency."""

from collectibles.auth.dependencies import OptionalUser, RequireSession
from collectibles.auth.models import AuthSession, User
from collectibles.auth.service import AuthService

__all__ = ["AuthService", "AuthSession", "OptionalUser", "RequireSession", "User"]
