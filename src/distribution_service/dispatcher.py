"""In-process request dispatcher standing in for a REST backend."""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional

from pydantic import TypeAdapter, ValidationError

from distribution_service.auth import AuthService
from distribution_service.config import Settings, get_settings
from distribution_service.logging import logger
from distribution_service.repositories import EntityStore
from distribution_service.routes import api_router
from distribution_service.routing import Request, Router, split_url
from distribution_service.services import AnalyticsService, ExportService, ReportService
from distribution_service.storage import SnapshotStorage

_BODY = TypeAdapter(dict[str, Any])


class DataService:
    """Answers ``verb + url + body`` calls from an explicitly owned entity store.

    Every call waits its configured latency first, so two calls issued back to
    back may complete in either order. Only authentication failures raise.
    """

    def __init__(
        self,
        store: EntityStore,
        settings: Optional[Settings] = None,
        storage: Optional[SnapshotStorage] = None,
        router: Optional[Router] = None,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self.storage = storage if storage is not None else store.storage
        self.router = router or api_router
        self.analytics = AnalyticsService(store)
        self.reports = ReportService(store, self.analytics)
        self.exports = ExportService(self.reports)
        self.auth = AuthService(store, self.storage, self.settings.auth.token_prefix)

    async def get(self, url: str) -> Any:
        return await self.request("GET", url)

    async def post(self, url: str, body: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request("POST", url, body)

    async def put(self, url: str, body: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request("PUT", url, body)

    async def delete(self, url: str) -> Any:
        return await self.request("DELETE", url)

    async def request(self, method: str, url: str, body: Optional[Mapping[str, Any]] = None) -> Any:
        method = method.upper()
        await asyncio.sleep(self._latency_ms(method) / 1000)

        path, query = split_url(url)
        resolved = self.router.resolve(method, path)
        if resolved is None:
            logger.debug("No route matched", method=method, path=path)
            return {}

        route, params = resolved
        try:
            payload = _BODY.validate_python(body or {})
            request = Request(method=method, path=path, params=params, query=query, body=payload)
            return route.handler(self, request)
        except ValidationError as exc:
            logger.warning("Request rejected", route=route.name, errors=exc.error_count())
            return {
                "success": False,
                "errors": exc.errors(include_url=False, include_context=False, include_input=False),
            }
        except ValueError as exc:
            logger.warning("Request rejected", route=route.name, error=str(exc))
            return {"success": False, "errors": [str(exc)]}

    def _latency_ms(self, method: str) -> int:
        latency = self.settings.latency
        if method == "GET":
            return latency.read_ms
        if method == "POST":
            return latency.write_ms
        return latency.update_ms


__all__ = ["DataService"]
