"""Route factory — classifies target strings and registers routes.

- Delimited regular expressions (``~^/cats/([0-9]+)$~``) create PATTERN routes
- Targets ending with ``*`` create PREFIX routes
- Targets containing URI variables (``/cats/{id}``) create TEMPLATE routes
- Everything else creates STATIC routes
"""

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from switchyard.dispatch import resolve_dispatchable
from switchyard.routing.method_map import MethodMap
from switchyard.routing.pattern import compile_pattern, is_pattern
from switchyard.routing.route import Route, RouteKind
from switchyard.routing.template import RE_SLUG, compile_template, is_template

if TYPE_CHECKING:
    from switchyard.routing.table import RouteTable

logger = logging.getLogger("switchyard.routing")


def classify(target: str) -> RouteKind:
    """Return the kind of route *target* describes."""
    if is_pattern(target):
        return RouteKind.PATTERN
    if target.endswith("*"):
        return RouteKind.PREFIX
    if is_template(target):
        return RouteKind.TEMPLATE
    return RouteKind.STATIC


class RouteFactory:
    """Builds routes from target strings.

    Usage::

        factory = RouteFactory()
        route = factory.create("/cats/{id}", show_cat, {"id": RE_NUM})
        factory.register(table, "/cats/", {"GET": list_cats})
    """

    __slots__ = ("default_variable_pattern", "list_allowed_methods")

    def __init__(
        self,
        default_variable_pattern: str = RE_SLUG,
        *,
        list_allowed_methods: bool = True,
    ) -> None:
        self.default_variable_pattern = default_variable_pattern
        self.list_allowed_methods = list_allowed_methods

    def create(
        self,
        target: str,
        dispatchable: Any,
        extra: str | Mapping[str, str] | None = None,
    ) -> Route:
        """Create a route for *target* without registering it.

        *extra* only applies to TEMPLATE targets: a pattern string for
        every variable, or a mapping of per-variable patterns.

        Raises ``InvalidRouteTarget`` for malformed templates or patterns
        and ``ConfigurationError`` for dispatchables that cannot be run.
        """
        kind = classify(target)
        resolved = resolve_dispatchable(
            dispatchable, list_allowed_methods=self.list_allowed_methods
        )

        if kind is RouteKind.PATTERN:
            return Route(target, kind, resolved, compile_pattern(target))
        if kind is RouteKind.PREFIX:
            return Route(target, kind, resolved, target[:-1])
        if kind is RouteKind.TEMPLATE:
            pattern = compile_template(
                target,
                extra,
                default_pattern=self.default_variable_pattern,
            )
            return Route(target, kind, resolved, pattern)
        return Route(target, kind, resolved, target)

    def register(
        self,
        table: "RouteTable",
        target: str,
        dispatchable: Any,
        extra: str | Mapping[str, str] | None = None,
    ) -> Route:
        """Create a route for *target* and add it to *table*.

        Registering a target that is already in the table keeps the
        existing route: a method map is merged into the route's method
        map, anything else replaces the route's dispatch target.
        """
        existing = table.get(target)
        if existing is None:
            route = self.create(target, dispatchable, extra)
            table.add_route(route)
            logger.debug("Registered %s route %r -> %s", route.kind.name, target, route.dispatchable.describe())
            return route

        resolved = resolve_dispatchable(
            dispatchable, list_allowed_methods=self.list_allowed_methods
        )
        current = existing.dispatchable
        if isinstance(current, MethodMap) and isinstance(resolved, MethodMap):
            current.merge(resolved)
            logger.debug("Extended route %r with methods %s", target, ", ".join(resolved.methods))
        else:
            existing.dispatchable = resolved
            logger.debug("Rebound route %r -> %s", target, resolved.describe())
        return existing
