"""Authentication models."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, field_validator


class LoginRequest(BaseModel):
    """Login request model."""
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Validate email format allowing .local domains."""
        email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        if not re.match(email_pattern, v):
            raise ValueError('Invalid email format')
        return v.lower()


class TokenResponse(BaseModel):
    """Token plus the sanitized user it was issued for."""
    token: str
    token_type: str = "bearer"
    user: dict[str, Any]
