"""Ordered path-rule table used by the dispatcher.

Rules are tested top to bottom and the first match wins, so a specific rule
such as ``/clients/pricing-tiers`` has to be registered before
``/clients/{client_id}``. Patterns match whole path segments only.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional
from urllib.parse import parse_qsl, urlsplit

from starlette.convertors import Convertor, register_url_convertor
from starlette.routing import compile_path

_UNTYPED_PARAM = re.compile(r"\{(\w+)\}")
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

Handler = Callable[..., Any]


@dataclass
class Request:
    method: str
    path: str
    params: dict[str, Any] = field(default_factory=dict)
    query: dict[str, Any] = field(default_factory=dict)
    body: dict[str, Any] = field(default_factory=dict)


def to_snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).replace("-", "_").lower()


def split_url(url: str) -> tuple[str, dict[str, str]]:
    """Split ``/path?x=1`` into a normalized path and a flat query dict.

    Repeated keys are joined with commas so they act as a membership filter.
    """
    parts = urlsplit(url)
    path = "/" + parts.path.strip("/")
    query: dict[str, str] = {}
    for key, value in parse_qsl(parts.query):
        key = to_snake(key)
        query[key] = f"{query[key]},{value}" if key in query else value
    return path, query


class IdentifierConvertor(Convertor):
    """Untyped path parameter: digits become ``int``, anything else stays ``str``."""

    regex = "[^/]+"

    def convert(self, value: str) -> Any:
        return int(value) if value.isdigit() else value

    def to_string(self, value: Any) -> str:
        return str(value)


register_url_convertor("id", IdentifierConvertor())


class Route:
    def __init__(
        self,
        method: str,
        pattern: str,
        handler: Handler,
        name: Optional[str] = None,
        summary: Optional[str] = None,
    ):
        self.method = method.upper()
        self.pattern = "/" + pattern.strip("/")
        self.handler = handler
        self.name = name or getattr(handler, "__name__", self.pattern)
        self.summary = summary
        self._regex, _, self._convertors = compile_path(
            _UNTYPED_PARAM.sub(r"{\1:id}", self.pattern)
        )

    def match(self, method: str, path: str) -> Optional[dict[str, Any]]:
        if method.upper() != self.method:
            return None
        found = self._regex.match(path)
        if found is None:
            return None
        return {name: self._convertors[name].convert(value) for name, value in found.groupdict().items()}

    def __repr__(self) -> str:
        return f"Route({self.method} {self.pattern} -> {self.name})"


class Router:
    """Statically ordered rule table with FastAPI-style registration decorators."""

    def __init__(self, prefix: str = "", tags: Optional[list[str]] = None):
        self.prefix = "/" + prefix.strip("/") if prefix.strip("/") else ""
        self.tags = tags or []
        self.routes: list[Route] = []

    def add_route(self, method: str, path: str, handler: Handler, summary: Optional[str] = None) -> Route:
        route = Route(method, f"{self.prefix}/{path.strip('/')}", handler, summary=summary)
        self.routes.append(route)
        return route

    def route(self, method: str, path: str, summary: Optional[str] = None) -> Callable[[Handler], Handler]:
        def decorator(handler: Handler) -> Handler:
            self.add_route(method, path, handler, summary)
            return handler

        return decorator

    def get(self, path: str = "", summary: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route("GET", path, summary)

    def post(self, path: str = "", summary: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route("POST", path, summary)

    def put(self, path: str = "", summary: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route("PUT", path, summary)

    def delete(self, path: str = "", summary: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route("DELETE", path, summary)

    def include_router(self, router: "Router", prefix: str = "") -> None:
        """Append ``router``'s rules after the ones already registered."""
        for route in router.routes:
            self.add_route(
                route.method,
                f"{prefix.strip('/')}/{route.pattern.strip('/')}",
                route.handler,
                route.summary,
            )

    def resolve(self, method: str, path: str) -> Optional[tuple[Route, dict[str, Any]]]:
        for route in self.routes:
            params = route.match(method, path)
            if params is not None:
                return route, params
        return None


__all__ = ["Handler", "IdentifierConvertor", "Request", "Route", "Router", "split_url", "to_snake"]
