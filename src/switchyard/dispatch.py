"""Dispatch targets and the sequential dispatcher.

Anything registered with a router (a route's target, a hook, a status
handler, router-level middleware) is resolved once, at registration,
into one of these cases:

    ResponseTarget   -- a prebuilt Response, returned as-is
    HandlerTarget    -- a callable ``(request, response, next) -> Response``
    ChainTarget      -- an ordered sequence, dispatched item by item
    MethodMap        -- verb -> target mapping (see routing.method_map)
    LazyTarget       -- a class or ``"module:attr"`` string, bound on first use

Every case is itself a middleware, so the dispatcher only ever calls
``target(request, response, next)``.
"""

import importlib
import logging
import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from switchyard.errors import ConfigurationError
from switchyard.http.request import Request
from switchyard.http.response import Response
from switchyard.middleware.protocol import Middleware, Next

logger = logging.getLogger("switchyard.dispatch")


def describe(obj: Any) -> str:
    """Readable name for a dispatchable, used in errors and listings."""
    if isinstance(obj, DispatchTarget):
        return obj.describe()
    if isinstance(obj, str):
        return obj
    name = getattr(obj, "__qualname__", None) or getattr(type(obj), "__qualname__", None)
    module = getattr(obj, "__module__", None)
    if name and module and module != "builtins":
        return f"{module}.{name}"
    return name or repr(obj)


def terminal(request: Request, response: Response) -> Response:
    """Continuation that ends a chain, returning the response unchanged."""
    return response


def coerce_result(result: Any, response: Response, source: Any) -> Response:
    """Interpret a dispatchable's return value as the response.

    ``str`` and ``bytes`` become the body of the current response.
    """
    if isinstance(result, Response):
        return result
    if isinstance(result, (str, bytes)):
        return response.with_body(result)
    msg = (
        f"{describe(source)} returned {type(result).__name__}; "
        "a dispatchable must return a Response, str, or bytes."
    )
    raise TypeError(msg)


class DispatchTarget:
    """Base for resolved dispatch targets."""

    __slots__ = ()

    @property
    def source(self) -> Any:
        """The object this target was resolved from."""
        raise NotImplementedError

    def describe(self) -> str:
        return describe(self.source)

    def __call__(self, request: Request, response: Response, next: Next) -> Response:
        raise NotImplementedError


class ResponseTarget(DispatchTarget):
    """A prebuilt response. Short-circuits: ``next`` is never called."""

    __slots__ = ("response",)

    def __init__(self, response: Response) -> None:
        self.response = response

    @property
    def source(self) -> Response:
        return self.response

    def describe(self) -> str:
        return f"Response({self.response.status})"

    def __call__(self, request: Request, response: Response, next: Next) -> Response:
        return self.response


class HandlerTarget(DispatchTarget):
    """A middleware or terminal handler callable."""

    __slots__ = ("func",)

    def __init__(self, func: Middleware) -> None:
        self.func = func

    @property
    def source(self) -> Middleware:
        return self.func

    def __call__(self, request: Request, response: Response, next: Next) -> Response:
        result = self.func(request, response, next)
        return coerce_result(result, response, self.func)


class ChainTarget(DispatchTarget):
    """An ordered sequence of targets run as one middleware."""

    __slots__ = ("items", "_source")

    def __init__(self, items: tuple[DispatchTarget, ...], source: Any = None) -> None:
        self.items = items
        self._source = source if source is not None else items

    @property
    def source(self) -> Any:
        return self._source

    def describe(self) -> str:
        return "[" + ", ".join(item.describe() for item in self.items) + "]"

    def __call__(self, request: Request, response: Response, next: Next) -> Response:
        return run_sequence(self.items, request, response, next)


class LazyTarget(DispatchTarget):
    """A class or import string bound to a real target on first dispatch.

    Classes are instantiated with no arguments. The bound target is
    cached; resolution happens once even under concurrent first requests.
    """

    __slots__ = ("_lock", "_reference", "_resolved")

    def __init__(self, reference: type | str) -> None:
        self._reference = reference
        self._resolved: DispatchTarget | None = None
        self._lock = threading.Lock()

    @property
    def source(self) -> type | str:
        return self._reference

    @property
    def resolved(self) -> DispatchTarget | None:
        """The bound target, or None before first dispatch."""
        return self._resolved

    def resolve(self) -> DispatchTarget:
        """Bind the reference now (idempotent)."""
        if self._resolved is not None:
            return self._resolved
        with self._lock:
            if self._resolved is None:
                obj = self._reference
                if isinstance(obj, str):
                    obj = import_reference(obj)
                if isinstance(obj, type):
                    obj = obj()
                target = resolve_dispatchable(obj)
                if isinstance(target, LazyTarget):
                    target = target.resolve()
                logger.debug("Bound %s to %s", describe(self._reference), target.describe())
                self._resolved = target
        return self._resolved

    def __call__(self, request: Request, response: Response, next: Next) -> Response:
        return self.resolve()(request, response, next)


def import_reference(reference: str) -> Any:
    """Import the object named by ``"module:attr"`` or ``"module.attr"``.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
    """
    if ":" in reference:
        module_path, _, attr_path = reference.partition(":")
    else:
        module_path, _, attr_path = reference.rpartition(".")

    module = importlib.import_module(module_path)
    obj: Any = module
    for part in attr_path.split("."):
        obj = getattr(obj, part)
    return obj


def resolve_dispatchable(obj: Any, *, list_allowed_methods: bool = True) -> DispatchTarget:
    """Classify *obj* into a dispatch target.

    Mappings, including ones nested in sequences, become method maps
    that use *list_allowed_methods*.

    Raises ``ConfigurationError`` for objects that cannot be dispatched.
    """
    from switchyard.routing.method_map import MethodMap

    if isinstance(obj, DispatchTarget):
        return obj
    if isinstance(obj, Response):
        return ResponseTarget(obj)
    if isinstance(obj, Mapping):
        return MethodMap(obj, list_allowed_methods=list_allowed_methods)
    if isinstance(obj, type):
        return LazyTarget(obj)
    if isinstance(obj, str):
        module_path = obj.partition(":")[0] if ":" in obj else obj.rpartition(".")[0]
        if not module_path:
            msg = f"Cannot dispatch to {obj!r}: expected an import string like 'package.module:handler'."
            raise ConfigurationError(msg)
        return LazyTarget(obj)
    if callable(obj):
        return HandlerTarget(obj)
    if isinstance(obj, Sequence) and not isinstance(obj, (bytes, bytearray)):
        if not obj:
            msg = "Cannot dispatch to an empty middleware sequence."
            raise ConfigurationError(msg)
        items = tuple(
            resolve_dispatchable(item, list_allowed_methods=list_allowed_methods) for item in obj
        )
        return ChainTarget(items, source=obj)

    msg = f"Cannot dispatch to {type(obj).__name__} object {obj!r}."
    raise ConfigurationError(msg)


def run_sequence(
    items: Sequence[Middleware],
    request: Request,
    response: Response,
    next: Next,
    index: int = 0,
) -> Response:
    """Run ``items[index:]``; the last item's continuation is *next*."""
    if index >= len(items):
        return next(request, response)

    def continuation(req: Request, resp: Response) -> Response:
        return run_sequence(items, req, resp, next, index + 1)

    return items[index](request, response, continuation)


@dataclass(frozen=True, slots=True)
class Dispatcher:
    """Runs dispatchables against a request/response pair.

    Stateless; one instance is shared by every request a router handles.

    Usage::

        dispatcher = Dispatcher()
        response = dispatcher.dispatch([auth, cats_handler], request, Response())
    """

    def dispatch(
        self,
        dispatchable: Any,
        request: Request,
        response: Response,
        next: Next | None = None,
    ) -> Response:
        """Dispatch one target or an ordered sequence of targets.

        Raw objects are resolved on the fly; targets resolved at
        registration are used directly.
        """
        next = next or terminal
        if isinstance(dispatchable, DispatchTarget):
            return dispatchable(request, response, next)
        if isinstance(dispatchable, (list, tuple)):
            items = tuple(resolve_dispatchable(item) for item in dispatchable)
            return run_sequence(items, request, response, next)
        return resolve_dispatchable(dispatchable)(request, response, next)
