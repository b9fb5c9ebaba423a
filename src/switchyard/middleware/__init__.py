"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    def mw(request: Request, response: Response, next: Next) -> Response

Built-in middleware:
    ContentLengthPrep -- Set Content-Length from the final body
    HeadPrep -- Drop the body of HEAD responses, keeping headers
"""

from switchyard.middleware.prep import ContentLengthPrep, HeadPrep
from switchyard.middleware.protocol import Middleware, Next

__all__ = [
    "ContentLengthPrep",
    "HeadPrep",
    "Middleware",
    "Next",
]
