"""Response shaping shared by the resource routers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional

from distribution_service.models import Record
from distribution_service.repositories import Repository
from distribution_service.routing import Request, Router

if TYPE_CHECKING:
    from distribution_service.dispatcher import DataService


def dump(record: Optional[Record]) -> Optional[dict[str, Any]]:
    return record.model_dump(mode="json") if record is not None else None


def list_response(key: str, records: Iterable[Record]) -> dict[str, Any]:
    items = [dump(record) for record in records]
    return {key: items, "total": len(items)}


def created(key: str, record: Record) -> dict[str, Any]:
    return {"success": True, key: dump(record)}


def updated(key: str, record: Optional[Record]) -> dict[str, Any]:
    return {"success": record is not None, key: dump(record)}


def query_int(query: Mapping[str, Any], name: str, default: int) -> int:
    try:
        return int(query.get(name, default))
    except (TypeError, ValueError):
        return default


def crud_routes(
    router: Router,
    repository_name: str,
    key: str,
    plural: str,
    param: str,
    *,
    delete: bool = False,
) -> None:
    """Register list, read, create and update rules (plus delete when allowed) on ``router``."""

    def repository(service: "DataService") -> Repository:
        return service.store.repository(repository_name)

    def list_records(service: "DataService", request: Request) -> dict[str, Any]:
        return list_response(plural, repository(service).list(request.query))

    def get_record(service: "DataService", request: Request) -> Optional[dict[str, Any]]:
        return dump(repository(service).get(request.params[param]))

    def create_record(service: "DataService", request: Request) -> dict[str, Any]:
        return created(key, repository(service).create(request.body))

    def update_record(service: "DataService", request: Request) -> dict[str, Any]:
        return updated(key, repository(service).update(request.params[param], request.body))

    def delete_record(service: "DataService", request: Request) -> dict[str, Any]:
        return {"success": repository(service).remove(request.params[param])}

    router.get("", summary=f"List {plural}")(list_records)
    router.get(f"/{{{param}}}", summary=f"Get one {key}")(get_record)
    router.post("", summary=f"Create {key}")(create_record)
    router.put(f"/{{{param}}}", summary=f"Update {key}")(update_record)
    if delete:
        router.delete(f"/{{{param}}}", summary=f"Delete {key}")(delete_record)


__all__ = ["created", "crud_routes", "dump", "list_response", "query_int", "updated"]
