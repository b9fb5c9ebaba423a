"""Route, RouteKind, and RouteMatch."""

import enum
import re
from dataclasses import dataclass

from switchyard.dispatch import DispatchTarget
from switchyard.http.request import Request
from switchyard.http.response import Response
from switchyard.middleware.protocol import Next
from switchyard.routing.method_map import MethodMap
from switchyard.routing.pattern import pattern_variables


class RouteKind(enum.Enum):
    """How a route's target is matched against a request path.

    STATIC:   ``/cats/``          exact path
    PREFIX:   ``/cats/*``         literal prefix, longest wins
    TEMPLATE: ``/cats/{id}``      URI template, variables captured
    PATTERN:  ``~^/cats/(\\d+)$~`` delimited regular expression
    """

    STATIC = "static"
    PREFIX = "prefix"
    TEMPLATE = "template"
    PATTERN = "pattern"


class Route:
    """A registered target bound to a dispatch target.

    ``kind`` and the matcher are fixed at construction; TEMPLATE and
    PATTERN matchers are compiled once and reused for every request.
    The dispatch target may be rebound while routes are being registered.
    """

    __slots__ = ("_kind", "_matcher", "_target", "dispatchable")

    def __init__(
        self,
        target: str,
        kind: RouteKind,
        dispatchable: DispatchTarget,
        matcher: str | re.Pattern[str],
    ) -> None:
        if kind in (RouteKind.TEMPLATE, RouteKind.PATTERN) and not isinstance(matcher, re.Pattern):
            msg = f"{kind.name} routes need a compiled pattern, got {matcher!r}."
            raise TypeError(msg)
        self._target = target
        self._kind = kind
        self._matcher = matcher
        self.dispatchable = dispatchable

    @property
    def target(self) -> str:
        """The string the route was registered with."""
        return self._target

    @property
    def kind(self) -> RouteKind:
        return self._kind

    @property
    def matcher(self) -> str | re.Pattern[str]:
        """Literal path, literal prefix, or compiled pattern, by kind."""
        return self._matcher

    @property
    def methods(self) -> tuple[str, ...] | None:
        """Mapped verbs when the target is a method map, else None (any method)."""
        if isinstance(self.dispatchable, MethodMap):
            return self.dispatchable.methods
        return None

    def match(self, path: str) -> dict[str, str] | None:
        """Return path variables if *path* matches, else None."""
        kind = self._kind
        if kind is RouteKind.STATIC:
            return {} if path == self._matcher else None
        if kind is RouteKind.PREFIX:
            return {} if path.startswith(self._matcher) else None  # type: ignore[arg-type]

        found = self._matcher.fullmatch(path)  # type: ignore[union-attr]
        if found is None:
            return None
        if kind is RouteKind.TEMPLATE:
            return found.groupdict()
        return pattern_variables(found)

    def dispatch(self, request: Request, response: Response, next: Next) -> Response:
        """Run the route's dispatch target."""
        return self.dispatchable(request, response, next)

    __call__ = dispatch

    def __repr__(self) -> str:
        return f"Route({self._target!r}, {self._kind.name}, {self.dispatchable.describe()})"


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_variables: dict[str, str]
