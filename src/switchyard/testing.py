"""Test client for switchyard routers.

Uses the same Request and Response types as production and calls
``Router.dispatch`` directly, with no ASGI or HTTP involved.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from switchyard.http.headers import Headers
from switchyard.http.request import Request
from switchyard.http.response import Response
from switchyard.router import Router


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Synchronous test client for switchyard routers.

    Usage::

        client = TestClient(router)
        response = client.get("/cats/42")
        assert response.status == 200
    """

    __slots__ = ("router",)

    def __init__(self, router: Router) -> None:
        self.router = router

    def request(
        self,
        method: str,
        target: str,
        *,
        headers: Mapping[str, str] | Iterable[tuple[str, str]] = (),
        body: str | bytes = b"",
        attributes: Mapping[str, Any] | None = None,
    ) -> Response:
        """Dispatch one request and return the final response."""
        request = Request(
            method=method.upper(),
            target=target,
            headers=Headers(headers),
            body=body.encode("utf-8") if isinstance(body, str) else body,
        )
        if attributes:
            request = request.with_attributes(attributes)
        return self.router.dispatch(request)

    def get(self, target: str, **kwargs: Any) -> Response:
        return self.request("GET", target, **kwargs)

    def head(self, target: str, **kwargs: Any) -> Response:
        return self.request("HEAD", target, **kwargs)

    def post(self, target: str, **kwargs: Any) -> Response:
        return self.request("POST", target, **kwargs)

    def put(self, target: str, **kwargs: Any) -> Response:
        return self.request("PUT", target, **kwargs)

    def patch(self, target: str, **kwargs: Any) -> Response:
        return self.request("PATCH", target, **kwargs)

    def delete(self, target: str, **kwargs: Any) -> Response:
        return self.request("DELETE", target, **kwargs)

    def options(self, target: str, **kwargs: Any) -> Response:
        return self.request("OPTIONS", target, **kwargs)
