"""Switchyard — request routing and middleware dispatch.

Picks the route for a request path among static, prefix, URI template,
and regular expression targets, extracts path variables, and runs
middleware and hooks around the matched handler.

Basic usage::

    from switchyard import Router, Request

    router = Router()

    def show_cat(request, response, next):
        return response.with_body(f"cat {request.get_attribute('id')}")

    router.add("/cats/{id}", {"GET": show_cat})
    response = router.dispatch(Request("GET", "/cats/42"))

Serving over ASGI::

    app = router.asgi()
"""

__version__ = "0.1.0-dev"
__all__ = [
    "ConfigurationError",
    "Dispatcher",
    "HTTPError",
    "InvalidRouteTarget",
    "MethodMap",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "Request",
    "Response",
    "Route",
    "RouteKind",
    "Router",
    "RouterConfig",
    "SwitchyardError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import switchyard`` fast while providing a clean top-level API.
    """
    if name == "Router":
        from switchyard.router import Router

        return Router

    if name == "RouterConfig":
        from switchyard.config import RouterConfig

        return RouterConfig

    if name == "Request":
        from switchyard.http.request import Request

        return Request

    if name == "Response":
        from switchyard.http.response import Response

        return Response

    if name in ("Route", "RouteKind"):
        from switchyard.routing import route as _route

        return getattr(_route, name)

    if name == "MethodMap":
        from switchyard.routing.method_map import MethodMap

        return MethodMap

    if name == "Dispatcher":
        from switchyard.dispatch import Dispatcher

        return Dispatcher

    if name in ("Middleware", "Next"):
        from switchyard.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in (
        "ConfigurationError",
        "HTTPError",
        "InvalidRouteTarget",
        "MethodNotAllowed",
        "NotFound",
        "SwitchyardError",
    ):
        from switchyard import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
