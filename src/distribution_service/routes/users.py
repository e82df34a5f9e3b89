"""User management routes; the stored credential never leaves the store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from distribution_service.models import User
from distribution_service.routing import Request, Router

if TYPE_CHECKING:
    from distribution_service.dispatcher import DataService

users_router = Router(prefix="/users", tags=["users"])


def _public(user: Optional[User]) -> Optional[dict[str, Any]]:
    return user.public() if user is not None else None


@users_router.get("", summary="List users")
def list_users(service: "DataService", request: Request) -> dict[str, Any]:
    users = service.store.users.public_list(request.query)
    return {"users": users, "total": len(users)}


@users_router.post("/{user_id}/reset-password", summary="Request a password reset")
def reset_password(service: "DataService", request: Request) -> dict[str, Any]:
    return {"success": True, "message": "Password reset email sent"}


@users_router.get("/{user_id}")
def get_user(service: "DataService", request: Request) -> Optional[dict[str, Any]]:
    return _public(service.store.users.get(request.params["user_id"]))


@users_router.post("", summary="Create user")
def create_user(service: "DataService", request: Request) -> dict[str, Any]:
    return {"success": True, "user": _public(service.store.users.create(request.body))}


@users_router.put("/{user_id}", summary="Update user")
def update_user(service: "DataService", request: Request) -> dict[str, Any]:
    user = service.store.users.update(request.params["user_id"], request.body)
    return {"success": user is not None, "user": _public(user)}


@users_router.delete("/{user_id}", summary="Delete user")
def delete_user(service: "DataService", request: Request) -> dict[str, Any]:
    return {"success": service.store.users.remove(request.params["user_id"])}
