"""ASGI adapter — the boundary between an ASGI server and a Router.

The only component that touches raw ASGI directly. Reads the request,
runs the synchronous router in a worker thread, and sends the response
back through ASGI ``send()``.
"""

import logging
from functools import partial

import anyio.to_thread

from switchyard._internal.asgi import Receive, Scope, Send
from switchyard.http.request import Request
from switchyard.http.response import Response
from switchyard.middleware.prep import body_allowed
from switchyard.router import Router

logger = logging.getLogger("switchyard.server")


async def read_body(receive: Receive) -> bytes:
    """Read the full request body from ASGI ``http.request`` messages."""
    chunks: list[bytes] = []
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            break
        body = message.get("body", b"")
        if body:
            chunks.append(body)
        if not message.get("more_body", False):
            break
    return b"".join(chunks)


async def send_response(response: Response, send: Send) -> None:
    """Translate a Response into ASGI send() calls."""
    raw_headers: list[tuple[bytes, bytes]] = [
        (name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in response.headers
    ]
    body = response.body_bytes if body_allowed(response.status) else b""

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )


class ASGIAdapter:
    """Serve a Router as an ASGI 3 application.

    Usage::

        router = Router()
        router.add("/cats/", {"GET": list_cats})
        app = router.asgi()  # run with any ASGI server

    Unexpected exceptions from handlers are logged and answered with a
    bare 500; ``HTTPError`` never reaches this layer because the router
    converts it.
    """

    __slots__ = ("router",)

    def __init__(self, router: Router) -> None:
        self.router = router

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        body = await read_body(receive)
        request = Request.from_asgi(scope, body)

        try:
            response = await anyio.to_thread.run_sync(partial(self.router.dispatch, request))
        except Exception:
            logger.exception("500 %s %s", request.method, request.path)
            body = b"Internal Server Error"
            response = Response(body=body, status=500).with_header("Content-Length", str(len(body)))

        await send_response(response, send)

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        """Acknowledge startup and shutdown; a router holds no resources."""
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return
