"""Authentication against the user collection."""

from distribution_service.auth.auth_service import AuthService
from distribution_service.auth.models import LoginRequest, TokenResponse

__all__ = ["AuthService", "LoginRequest", "TokenResponse"]
