"""Authentication routes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from distribution_service.routing import Request, Router

if TYPE_CHECKING:
    from distribution_service.dispatcher import DataService

auth_router = Router(prefix="/auth", tags=["auth"])


@auth_router.post("/login", summary="Login with email and password")
def login(service: "DataService", request: Request) -> dict[str, Any]:
    """Login user and return the token with the sanitized profile."""
    response = service.auth.login(request.body.get("email"), request.body.get("password"))
    return {"token": response.token, "user": response.user}


@auth_router.get("/me", summary="Get current user info")
def me(service: "DataService", request: Request) -> dict[str, Any]:
    return {"user": service.auth.current_user()}


@auth_router.post("/logout", summary="Forget the stored session")
def logout(service: "DataService", request: Request) -> dict[str, Any]:
    service.auth.logout()
    return {"success": True}
