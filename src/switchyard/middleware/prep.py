"""Response-preparation hooks.

Installed on every Router by default and run last, after post-route
hooks, in this order:

1. ``ContentLengthPrep`` measures the body that a GET would send.
2. ``HeadPrep`` drops that body for HEAD requests, keeping the headers.
"""

from switchyard.http.request import Request
from switchyard.http.response import Response
from switchyard.middleware.protocol import Next


def body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


class ContentLengthPrep:
    """Set ``Content-Length`` from the size of the final body.

    Leaves the response alone when it already carries a length, uses
    chunked transfer encoding, or has a status that forbids a body.
    """

    __slots__ = ()

    def __call__(self, request: Request, response: Response, next: Next) -> Response:
        if response.has_header("Content-Length"):
            return next(request, response)
        encoding = response.get_header("Transfer-Encoding", "") or ""
        if "chunked" in encoding.lower():
            return next(request, response)
        if not body_allowed(response.status):
            return next(request, response)

        length = len(response.body_bytes)
        return next(request, response.with_header("Content-Length", str(length)))

    def __repr__(self) -> str:
        return "ContentLengthPrep()"


class HeadPrep:
    """Discard the body of a response to a HEAD request."""

    __slots__ = ()

    def __call__(self, request: Request, response: Response, next: Next) -> Response:
        if request.method.upper() == "HEAD" and response.body:
            response = response.with_body(b"")
        return next(request, response)

    def __repr__(self) -> str:
        return "HeadPrep()"
