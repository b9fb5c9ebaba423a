"""Method map — selects a dispatch target by HTTP method.

Keys are verbs, comma-separated verb lists, or ``*``::

    MethodMap({
        "GET": list_cats,
        "POST,PUT": save_cat,
        "*": fallback,
    })

Selection for a request method: exact verb, then GET for HEAD, then
``*``. Unmapped OPTIONS answers 200 with ``Allow``; anything else
answers 405 with ``Allow`` and the allowed list in the body.
"""

import re
from collections.abc import Iterable, Mapping
from typing import Any

from switchyard.dispatch import DispatchTarget, resolve_dispatchable
from switchyard.errors import ConfigurationError
from switchyard.http.request import Request
from switchyard.http.response import Response
from switchyard.middleware.protocol import Next

WILDCARD = "*"

# RFC 9110 token characters, upper-cased
_VERB_RE = re.compile(r"[A-Z0-9!#$%&'*+\-.^_`|~]+")


def parse_methods(methods: str | Iterable[str]) -> tuple[str, ...]:
    """Normalize a verb list to upper-case verbs.

    Accepts ``"GET"``, ``"get, head"``, ``["GET", "HEAD"]`` or ``"*"``.
    Raises ``ConfigurationError`` for empty, malformed, or repeated verbs.
    """
    raw = methods.split(",") if isinstance(methods, str) else list(methods)
    verbs: list[str] = []
    for item in raw:
        verb = str(item).strip().upper()
        if not verb:
            msg = f"Empty HTTP method in {methods!r}."
            raise ConfigurationError(msg)
        if verb != WILDCARD and (not _VERB_RE.fullmatch(verb) or WILDCARD in verb):
            msg = f"Malformed HTTP method {verb!r} in {methods!r}."
            raise ConfigurationError(msg)
        if verb in verbs:
            msg = f"HTTP method {verb!r} listed twice in {methods!r}."
            raise ConfigurationError(msg)
        verbs.append(verb)
    if not verbs:
        msg = "At least one HTTP method is required."
        raise ConfigurationError(msg)
    return tuple(verbs)


class MethodMap(DispatchTarget):
    """Verb → dispatch target mapping, itself a middleware.

    Mutable during setup: ``register`` and ``merge`` add or overwrite
    verbs. Read-only once requests are being served.
    """

    __slots__ = ("_map", "list_allowed_methods")

    def __init__(
        self,
        mapping: Mapping[str | tuple[str, ...], Any] | None = None,
        *,
        list_allowed_methods: bool = True,
    ) -> None:
        self._map: dict[str, DispatchTarget] = {}
        self.list_allowed_methods = list_allowed_methods
        if mapping:
            self.add_map(mapping)

    @property
    def source(self) -> "MethodMap":
        return self

    def describe(self) -> str:
        inner = ", ".join(f"{verb}: {target.describe()}" for verb, target in self._map.items())
        return f"MethodMap({{{inner}}})"

    # -- Registration --

    def register(self, methods: str | Iterable[str], dispatchable: Any) -> None:
        """Map each verb in *methods* to *dispatchable*, overwriting prior entries."""
        target = resolve_dispatchable(dispatchable, list_allowed_methods=self.list_allowed_methods)
        for verb in parse_methods(methods):
            self._map[verb] = target

    def add_map(self, mapping: Mapping[str | tuple[str, ...], Any]) -> None:
        """Register every ``methods -> dispatchable`` pair in *mapping*."""
        for methods, dispatchable in mapping.items():
            self.register(methods, dispatchable)

    def merge(self, other: "MethodMap") -> None:
        """Copy every verb of *other* into this map, overwriting on conflict."""
        self._map.update(other._map)

    # -- Introspection --

    @property
    def methods(self) -> tuple[str, ...]:
        """Mapped verbs in registration order, including ``*`` if mapped."""
        return tuple(self._map)

    @property
    def allowed_methods(self) -> tuple[str, ...]:
        """Verbs advertised in ``Allow``.

        Mapped verbs, plus HEAD when GET is mapped, plus OPTIONS.
        """
        allowed = [verb for verb in self._map if verb != WILDCARD]
        if "GET" in allowed and "HEAD" not in allowed:
            allowed.append("HEAD")
        if "OPTIONS" not in allowed:
            allowed.append("OPTIONS")
        return tuple(allowed)

    def __contains__(self, method: object) -> bool:
        return isinstance(method, str) and method.upper() in self._map

    def __len__(self) -> int:
        return len(self._map)

    def get(self, method: str) -> DispatchTarget | None:
        """The target that would serve *method*, or None."""
        method = method.upper()
        if method in self._map:
            return self._map[method]
        if method == "HEAD" and "GET" in self._map:
            return self._map["GET"]
        return self._map.get(WILDCARD)

    # -- Dispatch --

    def __call__(self, request: Request, response: Response, next: Next) -> Response:
        target = self.get(request.method)
        if target is not None:
            return target(request, response, next)

        allow = ", ".join(self.allowed_methods)
        if request.method.upper() == "OPTIONS":
            return response.with_status(200).with_header("Allow", allow)

        response = response.with_status(405)
        if not self.list_allowed_methods:
            return response.with_body("Method Not Allowed")
        return response.with_header("Allow", allow).with_body(
            f"Method not allowed. Allowed methods: {allow}"
        )

    def __repr__(self) -> str:
        return self.describe()
