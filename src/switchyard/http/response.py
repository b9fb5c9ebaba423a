"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response. Immutable by convention,
built incrementally by design.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from http import HTTPStatus


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    Construct with a body, then chain ``.with_*()`` calls to set
    status and headers. Each call returns a new ``Response``.
    Header names keep the case they were set with; lookups ignore case.
    """

    body: str | bytes = b""
    status: int = 200
    headers: tuple[tuple[str, str], ...] = ()

    # -- Chainable transformations --

    def with_status(self, status: int) -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_body(self, body: str | bytes) -> Response:
        """Return a new Response with a different body."""
        return replace(self, body=body)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with *name* set to *value*, replacing prior values."""
        kept = tuple((k, v) for k, v in self.headers if k.lower() != name.lower())
        return replace(self, headers=(*kept, (name, value)))

    def with_added_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional value for *name*."""
        return replace(self, headers=(*self.headers, (name, value)))

    def without_header(self, name: str) -> Response:
        """Return a new Response with every value for *name* removed."""
        kept = tuple((k, v) for k, v in self.headers if k.lower() != name.lower())
        return replace(self, headers=kept)

    # -- Header access --

    def get_header(self, name: str, default: str | None = None) -> str | None:
        """Return the values for *name* joined with ``", "``, or *default*."""
        values = self.get_header_list(name)
        if not values:
            return default
        return ", ".join(values)

    def get_header_list(self, name: str) -> list[str]:
        """Return every value set for *name*."""
        lowered = name.lower()
        return [v for k, v in self.headers if k.lower() == lowered]

    def has_header(self, name: str) -> bool:
        lowered = name.lower()
        return any(k.lower() == lowered for k, _ in self.headers)

    # -- Body helpers --

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body

    @property
    def reason(self) -> str:
        """Standard reason phrase for the status code, or ``""``."""
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return ""
