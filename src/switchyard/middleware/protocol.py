"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    def my_mw(request: Request, response: Response, next: Next) -> Response: ...

No base class required. The dispatcher checks the shape, not the lineage.

``next`` runs the rest of the chain with whatever request and response
it is given and returns the resulting response. Not calling it stops
the chain; the middleware's own return value becomes the response.
"""

from collections.abc import Callable
from typing import Protocol, TypeAlias

from switchyard.http.request import Request
from switchyard.http.response import Response

# The rest of the chain
Next: TypeAlias = Callable[[Request, Response], Response]


class Middleware(Protocol):
    """Protocol for switchyard middleware and handlers.

    Accepts both functions and callable objects::

        # Function middleware
        def timing(request: Request, response: Response, next: Next) -> Response:
            start = time.monotonic()
            response = next(request, response)
            elapsed = time.monotonic() - start
            return response.with_header("X-Time", f"{elapsed:.3f}")

        # Terminal handler: never calls next
        def show_cat(request: Request, response: Response, next: Next) -> Response:
            return response.with_body(f"cat {request.get_attribute('id')}")
    """

    def __call__(self, request: Request, response: Response, next: Next) -> Response: ...
