"""Authentication service.

Demo-grade on purpose: credentials are compared in plain text by a linear
scan, and any locally stored token carrying the expected prefix is trusted
without verification.
"""

from __future__ import annotations

import time
from typing import Any, Optional

from pydantic import ValidationError

from distribution_service.auth.models import LoginRequest, TokenResponse
from distribution_service.config import get_settings
from distribution_service.errors import InvalidCredentialsError, UnauthorizedError
from distribution_service.logging import logger
from distribution_service.models import User
from distribution_service.repositories import EntityStore
from distribution_service.storage import SnapshotStorage


class AuthService:
    """Service for login and session lookup."""

    TOKEN_KEY = "token"
    USER_KEY = "user"

    def __init__(
        self,
        store: EntityStore,
        storage: Optional[SnapshotStorage] = None,
        token_prefix: str | None = None,
    ):
        self.store = store
        self.storage = storage
        self.token_prefix = token_prefix or get_settings().auth.token_prefix

    def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """Return the first user whose email and credential both match."""
        for user in self.store.users:
            if user.email.lower() == email and user.password == password:
                return user
        return None

    def create_token(self) -> str:
        return f"{self.token_prefix}{int(time.time() * 1000)}"

    def login(self, email: Any, password: Any) -> TokenResponse:
        """Login user and return token; raises ``InvalidCredentialsError``."""
        try:
            request = LoginRequest(email=email or "", password=password or "")
        except ValidationError:
            raise InvalidCredentialsError()

        user = self.authenticate_user(request.email, request.password)
        if user is None:
            logger.info("Login rejected", email=request.email)
            raise InvalidCredentialsError()

        token = self.create_token()
        public_user = user.public()
        if self.storage is not None:
            self.storage.save(self.TOKEN_KEY, token)
            self.storage.save(self.USER_KEY, public_user)
        logger.info("User logged in", user_id=user.id, role=user.role)
        return TokenResponse(token=token, user=public_user)

    def current_user(self) -> dict[str, Any]:
        """Return the stored user when a prefixed token is held locally."""
        token = self.storage.load(self.TOKEN_KEY) if self.storage is not None else None
        if isinstance(token, str) and token.startswith(self.token_prefix):
            user = self.storage.load(self.USER_KEY)
            if user:
                return user
        raise UnauthorizedError()

    def logout(self) -> None:
        if self.storage is not None:
            self.storage.remove(self.TOKEN_KEY)
            self.storage.remove(self.USER_KEY)
