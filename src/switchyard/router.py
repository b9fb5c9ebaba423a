"""Router — hooks, status handlers, and the route table in a fixed order.

Each request moves through these stages, never backwards:

1. pre-route hooks
2. route table dispatch (``HTTPError`` is caught here and becomes a response)
3. status handler for the resulting status code, if one is registered
4. post-route hooks
5. response-preparation hooks (``ContentLengthPrep``, ``HeadPrep`` by default)

A Router is itself a middleware, so routers nest::

    api = Router(RouterConfig(continue_on_not_found=True))
    api.add("/api/cats/{id}", {"GET": show_cat})

    site = Router()
    site.add("/api/*", api)
"""

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from switchyard.config import RouterConfig
from switchyard.dispatch import DispatchTarget, Dispatcher, resolve_dispatchable, terminal
from switchyard.errors import HTTPError
from switchyard.http.request import Request
from switchyard.http.response import Response
from switchyard.middleware.prep import ContentLengthPrep, HeadPrep
from switchyard.middleware.protocol import Next
from switchyard.routing.factory import RouteFactory
from switchyard.routing.method_map import MethodMap
from switchyard.routing.route import Route, RouteMatch
from switchyard.routing.table import RouteTable

if TYPE_CHECKING:
    from collections.abc import Callable

    from switchyard.server.asgi import ASGIAdapter

logger = logging.getLogger("switchyard.server")


def error_response(exc: HTTPError, response: Response) -> Response:
    """Turn a caught ``HTTPError`` into a response."""
    response = response.with_status(exc.status).with_body(exc.detail)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


class Router:
    """Owns one route table plus the hooks run around it.

    Routes and hooks are registered during setup. ``dispatch`` only reads
    them, so a fully configured router can serve concurrent requests.
    """

    __slots__ = (
        "_dispatcher",
        "_factory",
        "_post_route_hooks",
        "_pre_route_hooks",
        "_response_preparation_hooks",
        "_status_handlers",
        "_table",
        "config",
    )

    def __init__(self, config: RouterConfig | None = None) -> None:
        self.config: RouterConfig = config or RouterConfig()
        self._dispatcher = Dispatcher()
        self._factory = RouteFactory(
            self.config.default_variable_pattern,
            list_allowed_methods=self.config.list_allowed_methods,
        )
        self._table = RouteTable(self.config)
        self._pre_route_hooks: list[DispatchTarget] = []
        self._post_route_hooks: list[DispatchTarget] = []
        self._response_preparation_hooks: list[DispatchTarget] = [
            resolve_dispatchable(ContentLengthPrep()),
            resolve_dispatchable(HeadPrep()),
        ]
        self._status_handlers: dict[int, DispatchTarget] = {}

    # -- Route registration --

    def add(
        self,
        target: str,
        dispatchable: Any,
        extra: str | Mapping[str, str] | None = None,
    ) -> Route:
        """Register *dispatchable* for *target*.

        - Paths with no special characters create STATIC routes
        - Paths ending with ``*`` create PREFIX routes
        - Paths containing URI variables (``{id}``) create TEMPLATE routes
        - Delimited regular expressions (``~...~``) create PATTERN routes

        A mapping is treated as a method map (``{"GET": h, "PUT,POST": h2}``).
        Adding a method map to a target that already has one merges them.
        """
        return self._factory.register(self._table, target, dispatchable, extra)

    def register(
        self,
        methods: str | Iterable[str],
        target: str,
        dispatchable: Any,
        extra: str | Mapping[str, str] | None = None,
    ) -> Route:
        """Register *dispatchable* for the given verbs of *target*.

        Repeated calls for the same target extend one route::

            router.register("GET", "/cats/", list_cats)
            router.register("POST", "/cats/", create_cat)
        """
        method_map = MethodMap(list_allowed_methods=self.config.list_allowed_methods)
        method_map.register(methods, dispatchable)
        return self.add(target, method_map, extra)

    def route(
        self,
        target: str,
        *,
        methods: str | Iterable[str] | None = None,
        extra: str | Mapping[str, str] | None = None,
    ) -> "Callable[[Any], Any]":
        """Register a handler via decorator.

        Without *methods* the handler serves every method.
        """

        def decorator(func: Any) -> Any:
            if methods is None:
                self.add(target, func, extra)
            else:
                self.register(methods, target, func, extra)
            return func

        return decorator

    def add_middleware(self, middleware: Any) -> None:
        """Add middleware run around the matched route, in registration order."""
        self._table.add_middleware(middleware)

    # -- Hooks --

    def add_pre_route_hook(self, middleware: Any) -> None:
        """Run *middleware* before route matching on every request."""
        self._pre_route_hooks.append(self._resolve(middleware))

    def add_post_route_hook(self, middleware: Any) -> None:
        """Run *middleware* after routing on every request, even after an HTTPError."""
        self._post_route_hooks.append(self._resolve(middleware))

    def add_response_preparation_hook(self, middleware: Any) -> None:
        """Run *middleware* last, after the post-route hooks."""
        self._response_preparation_hooks.append(self._resolve(middleware))

    def remove_response_preparation_hook(self, hook: Any) -> None:
        """Remove a response-preparation hook by identity or by class.

        ``router.remove_response_preparation_hook(HeadPrep)`` removes the
        default HEAD handling. Raises ``ValueError`` if nothing matched.
        """
        kept = [
            target
            for target in self._response_preparation_hooks
            if not (
                target.source is hook
                or (isinstance(hook, type) and isinstance(target.source, hook))
            )
        ]
        if len(kept) == len(self._response_preparation_hooks):
            msg = f"{hook!r} is not a response preparation hook."
            raise ValueError(msg)
        self._response_preparation_hooks = kept

    def set_status_handler(self, status: int, middleware: Any) -> None:
        """Run *middleware* after routing whenever the response has *status*."""
        self._status_handlers[status] = self._resolve(middleware)

    # -- Introspection --

    @property
    def routes(self) -> list[Route]:
        """All routes in registration order."""
        return self._table.routes

    @property
    def route_table(self) -> RouteTable:
        return self._table

    @property
    def pre_route_hooks(self) -> tuple[DispatchTarget, ...]:
        return tuple(self._pre_route_hooks)

    @property
    def post_route_hooks(self) -> tuple[DispatchTarget, ...]:
        return tuple(self._post_route_hooks)

    @property
    def response_preparation_hooks(self) -> tuple[DispatchTarget, ...]:
        return tuple(self._response_preparation_hooks)

    def match(self, path: str) -> RouteMatch | None:
        """Find the route for *path* without dispatching."""
        return self._table.match(path)

    # -- Dispatch --

    def dispatch(
        self,
        request: Request,
        response: Response | None = None,
        next: Next | None = None,
        *,
        prepare: bool = True,
    ) -> Response:
        """Run one request through every stage and return the final response.

        *next* is only called when no route matches and the router was
        configured with ``continue_on_not_found``, or when a matched
        handler passes the request on. With *prepare* false the
        response-preparation stage is skipped.
        """
        response = response if response is not None else Response()
        next = next or terminal

        request, response = self._run_hooks(self._pre_route_hooks, request, response)

        try:
            response = self._table.dispatch(request, response, next)
        except HTTPError as exc:
            logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
            response = error_response(exc, response)

        handler = self._status_handlers.get(response.status)
        if handler is not None:
            response = self._dispatcher.dispatch(handler, request, response)

        request, response = self._run_hooks(self._post_route_hooks, request, response)
        if prepare:
            _, response = self._run_hooks(self._response_preparation_hooks, request, response)
        return response

    def __call__(self, request: Request, response: Response, next: Next) -> Response:
        """Run as middleware inside another router or chain.

        Response preparation is left to the outermost router, which sees
        the final body.
        """
        return self.dispatch(request, response, next, prepare=False)

    def _resolve(self, middleware: Any) -> DispatchTarget:
        return resolve_dispatchable(
            middleware, list_allowed_methods=self.config.list_allowed_methods
        )

    def _run_hooks(
        self,
        hooks: list[DispatchTarget],
        request: Request,
        response: Response,
    ) -> tuple[Request, Response]:
        """Run each hook on its own; a request passed to ``next`` carries forward."""
        for hook in hooks:
            passed = [request]

            def record(req: Request, resp: Response, _passed: list[Request] = passed) -> Response:
                _passed[0] = req
                return resp

            response = self._dispatcher.dispatch(hook, request, response, record)
            request = passed[0]
        return request, response

    # -- Boundary --

    def asgi(self) -> "ASGIAdapter":
        """Wrap this router as an ASGI application."""
        from switchyard.server.asgi import ASGIAdapter

        return ASGIAdapter(self)
