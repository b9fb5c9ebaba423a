"""Immutable HTTP request.

Every change produces a new Request. Routing and middleware augment a
request by attaching named attributes, never by mutating it in place.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any
from urllib.parse import urlsplit

from switchyard.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``target`` is the raw request target (``/cats/?page=2``, or the
    absolute form ``http://host/cats/``); ``path`` is its path component
    and is what routing matches against.
    """

    method: str = "GET"
    target: str = "/"
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""
    attributes: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None

    # -- Computed properties --

    @property
    def path(self) -> str:
        """Path component of the request target."""
        if self.target == "*":
            return self.target
        path = urlsplit(self.target).path
        return path or "/"

    @property
    def query_string(self) -> str:
        """Raw query component of the request target."""
        return urlsplit(self.target).query

    def get_method(self) -> str:
        """The request method as sent (upper-cased by convention)."""
        return self.method

    def get_request_target(self) -> str:
        """The raw request target."""
        return self.target

    def get_attribute(self, name: str, default: Any = None) -> Any:
        """Return a named attribute, or *default* if it was never attached."""
        return self.attributes.get(name, default)

    # -- Copies --

    def with_attribute(self, name: str, value: Any) -> Request:
        """Return a new Request with one additional attribute."""
        return self.with_attributes({name: value})

    def with_attributes(self, values: Mapping[str, Any]) -> Request:
        """Return a new Request with several additional attributes."""
        merged = {**self.attributes, **values}
        return replace(self, attributes=MappingProxyType(merged))

    def without_attribute(self, name: str) -> Request:
        """Return a new Request with *name* removed from the attributes."""
        remaining = {k: v for k, v in self.attributes.items() if k != name}
        return replace(self, attributes=MappingProxyType(remaining))

    def with_method(self, method: str) -> Request:
        """Return a new Request with a different method."""
        return replace(self, method=method.upper())

    def with_target(self, target: str) -> Request:
        """Return a new Request with a different request target."""
        return replace(self, target=target)

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], body: bytes = b"") -> Request:
        """Create a Request from an ASGI HTTP scope and the full body."""
        target = scope.get("path", "/")
        query = scope.get("query_string", b"")
        if query:
            target = f"{target}?{query.decode('latin-1')}"
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            target=target,
            headers=Headers.from_asgi(scope.get("headers", ())),
            body=body,
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
        )
