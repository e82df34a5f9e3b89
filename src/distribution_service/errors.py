"""Failures the data service surfaces to callers.

Only authentication problems are raised; everything else degrades to an
empty or ``success: False`` result.
"""

from __future__ import annotations


class DataServiceError(Exception):
    """Base class carrying a user-facing message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthenticationError(DataServiceError):
    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message)


class UnauthorizedError(AuthenticationError):
    pass


__all__ = ["AuthenticationError", "DataServiceError", "InvalidCredentialsError", "UnauthorizedError"]
