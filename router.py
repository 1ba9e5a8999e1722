"""Routing table mapping request paths to handlers."""

from __future__ import annotations

from collections.abc import Callable

from request import HTTPRequest
from response import HTTPResponse

Handler = Callable[[HTTPRequest], HTTPResponse]


class Router:
    def __init__(self) -> None:
        self._routes: dict[str, Handler] = {}
        self._prefix_routes: dict[str, Handler] = {}

    def add_route(self, path: str, handler: Handler) -> None:
        if not path.startswith("/"):
            raise ValueError("path must start with '/'")
        self._routes[path] = handler

    def add_prefix_route(self, prefix: str, handler: Handler) -> None:
        if not prefix.startswith("/"):
            raise ValueError("prefix must start with '/'")
        if not prefix.endswith("/"):
            raise ValueError("prefix must end with '/'")
        self._prefix_routes[prefix] = handler

    def resolve(self, path: str) -> Handler | None:
        """Return the handler for ``path``: exact match first, then longest prefix."""
        handler = self._routes.get(path)
        if handler is not None:
            return handler

        for prefix in sorted(self._prefix_routes, key=len, reverse=True):
            if path.startswith(prefix):
                return self._prefix_routes[prefix]
        return None
