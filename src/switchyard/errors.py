"""Switchyard exception hierarchy.

Shared across the route table, router, dispatcher, and boundary so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class SwitchyardError(Exception):
    """Base for all switchyard-specific errors."""


class ConfigurationError(SwitchyardError):
    """Raised when route or hook registration input is invalid.

    Raised at registration time, never deferred to request time.
    """


class InvalidRouteTarget(ConfigurationError, ValueError):  # noqa: N818
    """A route target string cannot be compiled.

    Covers malformed URI templates (two variables in one segment, repeated
    variable names) and delimited regex targets that do not compile.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(SwitchyardError):
    """An error that maps directly to an HTTP status code.

    Raised by handlers or middleware. ``Router.dispatch`` catches these
    and turns them into a response carrying ``status``, ``detail`` as the
    body, and ``headers``.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class BadRequest(HTTPError):  # noqa: N818
    """400 — the request is malformed."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class Unauthorized(HTTPError):  # noqa: N818
    """401 — authentication is required."""

    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(status=401, detail=detail)


class Forbidden(HTTPError):  # noqa: N818
    """403 — the client may not access this resource."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(status=403, detail=detail)


class NotFound(HTTPError):  # noqa: N818
    """404 — no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str] | tuple[str, ...], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        super().__init__(
            status=405,
            detail=detail or "Method Not Allowed",
            headers=(("Allow", allow_value),),
        )


class Conflict(HTTPError):  # noqa: N818
    """409 — the request conflicts with the resource's current state."""

    def __init__(self, detail: str = "Conflict") -> None:
        super().__init__(status=409, detail=detail)


class Gone(HTTPError):  # noqa: N818
    """410 — the resource existed but has been removed."""

    def __init__(self, detail: str = "Gone") -> None:
        super().__init__(status=410, detail=detail)


class InternalServerError(HTTPError):  # noqa: N818
    """500 — raised deliberately by application code."""

    def __init__(self, detail: str = "Internal Server Error") -> None:
        super().__init__(status=500, detail=detail)
