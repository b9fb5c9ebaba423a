"""Route table — indexes routes by kind and dispatches to the best match.

Matching order, first hit wins:

1. exact lookup among STATIC routes (dict, O(1))
2. longest literal prefix among PREFIX routes
3. TEMPLATE and PATTERN routes in registration order

Routes are registered during setup. Matching only reads the indexes, so
one table can serve concurrent requests without locking as long as no
routes are added meanwhile.
"""

import logging
from collections.abc import Mapping
from typing import Any, cast

from switchyard.config import RouterConfig
from switchyard.dispatch import DispatchTarget, resolve_dispatchable, run_sequence
from switchyard.errors import ConfigurationError
from switchyard.http.request import Request
from switchyard.http.response import Response
from switchyard.middleware.protocol import Next
from switchyard.routing.route import Route, RouteKind, RouteMatch

logger = logging.getLogger("switchyard.routing")


class RouteTable:
    """Owns every route of one router, organized for lookup by kind.

    Every route is in ``routes_by_target`` and in exactly one of
    ``static_index``, ``prefix_index``, ``pattern_routes``.
    """

    __slots__ = (
        "_middleware",
        "_prefix_keys",
        "config",
        "pattern_routes",
        "prefix_index",
        "routes_by_target",
        "static_index",
    )

    def __init__(self, config: RouterConfig | None = None) -> None:
        self.config = config or RouterConfig()
        self.routes_by_target: dict[str, Route] = {}
        self.static_index: dict[str, Route] = {}
        self.prefix_index: dict[str, Route] = {}
        self.pattern_routes: list[Route] = []
        # Prefix keys, longest first; rebuilt on registration, never per request
        self._prefix_keys: tuple[str, ...] = ()
        self._middleware: list[DispatchTarget] = []

    # -- Registration --

    def get(self, target: str) -> Route | None:
        """The route registered for *target*, if any."""
        return self.routes_by_target.get(target)

    def add_route(self, route: Route) -> None:
        """Index *route* by its target and kind."""
        if route.target in self.routes_by_target:
            msg = f"A route for {route.target!r} is already registered."
            raise ConfigurationError(msg)

        self.routes_by_target[route.target] = route
        if route.kind is RouteKind.STATIC:
            self.static_index[route.target] = route
        elif route.kind is RouteKind.PREFIX:
            prefix = cast(str, route.matcher)
            self.prefix_index[prefix] = route
            self._prefix_keys = tuple(sorted(self.prefix_index, key=len, reverse=True))
        else:
            self.pattern_routes.append(route)

    def add_middleware(self, middleware: Any) -> None:
        """Add router-level middleware, run around whichever route matches."""
        self._middleware.append(
            resolve_dispatchable(middleware, list_allowed_methods=self.config.list_allowed_methods)
        )

    @property
    def middleware(self) -> tuple[DispatchTarget, ...]:
        return tuple(self._middleware)

    @property
    def routes(self) -> list[Route]:
        """All routes in registration order."""
        return list(self.routes_by_target.values())

    def __len__(self) -> int:
        return len(self.routes_by_target)

    def __contains__(self, target: object) -> bool:
        return target in self.routes_by_target

    # -- Matching --

    def match(self, path: str) -> RouteMatch | None:
        """Find the route for *path*, or None.

        Two distinct prefixes of equal length can never both match one
        path, so the longest-prefix rule has no ties to break.
        """
        route = self.static_index.get(path)
        if route is not None:
            return RouteMatch(route=route, path_variables={})

        for prefix in self._prefix_keys:
            if path.startswith(prefix):
                return RouteMatch(route=self.prefix_index[prefix], path_variables={})

        for route in self.pattern_routes:
            variables = route.match(path)
            if variables is not None:
                return RouteMatch(route=route, path_variables=variables)

        return None

    def bind_path_variables(self, request: Request, variables: Mapping[str, str]) -> Request:
        """Attach *variables* to *request* according to the config."""
        bucket = self.config.path_variables_attribute
        if bucket:
            return request.with_attribute(bucket, dict(variables))
        if variables:
            return request.with_attributes(variables)
        return request

    # -- Dispatch --

    def dispatch(self, request: Request, response: Response, next: Next) -> Response:
        """Dispatch *request* to the matching route.

        With no match: call ``next`` once when ``continue_on_not_found``
        is set, otherwise answer 404 without calling it.
        """
        path = request.path
        found = self.match(path)
        if found is None:
            logger.debug("No route matches %s %s", request.method, path)
            if self.config.continue_on_not_found:
                return next(request, response)
            return response.with_status(404)

        request = self.bind_path_variables(request, found.path_variables)
        if self._middleware:
            return run_sequence((*self._middleware, found.route), request, response, next)
        return found.route.dispatch(request, response, next)
