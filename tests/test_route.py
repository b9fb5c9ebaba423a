"""Tests for switchyard.routing.route — Route, RouteKind, RouteMatch."""

import re

import pytest

from switchyard.dispatch import HandlerTarget, resolve_dispatchable
from switchyard.http.request import Request
from switchyard.http.response import Response
from switchyard.routing.method_map import MethodMap
from switchyard.routing.route import Route, RouteKind, RouteMatch


def _handler(request: Request, response: Response, next):  # noqa: A002
    return response.with_body("ok")


def _target() -> HandlerTarget:
    return HandlerTarget(_handler)


class TestRouteMatching:
    def test_static_exact_only(self) -> None:
        route = Route("/cats/", RouteKind.STATIC, _target(), "/cats/")
        assert route.match("/cats/") == {}
        assert route.match("/cats") is None
        assert route.match("/cats/1") is None

    def test_prefix(self) -> None:
        route = Route("/cats/*", RouteKind.PREFIX, _target(), "/cats/")
        assert route.match("/cats/") == {}
        assert route.match("/cats/1/toys") == {}
        assert route.match("/dogs/") is None

    def test_template_groupdict(self) -> None:
        pattern = re.compile(r"/cats/(?P<id>[0-9]+)")
        route = Route("/cats/{id}", RouteKind.TEMPLATE, _target(), pattern)
        assert route.match("/cats/42") == {"id": "42"}
        assert route.match("/cats/42/") is None

    def test_pattern_variables(self) -> None:
        pattern = re.compile(r"/cats/([0-9]+)")
        route = Route("~/cats/([0-9]+)~", RouteKind.PATTERN, _target(), pattern)
        assert route.match("/cats/42") == {"1": "42"}

    def test_template_requires_compiled_pattern(self) -> None:
        with pytest.raises(TypeError):
            Route("/cats/{id}", RouteKind.TEMPLATE, _target(), "/cats/{id}")


class TestRouteProperties:
    def test_read_only_identity(self) -> None:
        route = Route("/cats/", RouteKind.STATIC, _target(), "/cats/")
        assert route.target == "/cats/"
        assert route.kind is RouteKind.STATIC
        with pytest.raises(AttributeError):
            route.kind = RouteKind.PREFIX  # type: ignore[misc]

    def test_matcher_reused(self) -> None:
        pattern = re.compile(r"/cats/(?P<id>[0-9]+)")
        route = Route("/cats/{id}", RouteKind.TEMPLATE, _target(), pattern)
        route.match("/cats/1")
        route.match("/cats/2")
        assert route.matcher is pattern

    def test_methods_none_for_plain_handler(self) -> None:
        route = Route("/cats/", RouteKind.STATIC, _target(), "/cats/")
        assert route.methods is None

    def test_methods_from_method_map(self) -> None:
        route = Route("/cats/", RouteKind.STATIC, MethodMap({"GET,PUT": _handler}), "/cats/")
        assert route.methods == ("GET", "PUT")

    def test_dispatch_runs_target(self) -> None:
        route = Route("/cats/", RouteKind.STATIC, resolve_dispatchable(_handler), "/cats/")
        response = route.dispatch(Request("GET", "/cats/"), Response(), lambda req, resp: resp)
        assert response.text == "ok"

    def test_callable_as_middleware(self) -> None:
        route = Route("/cats/", RouteKind.STATIC, _target(), "/cats/")
        response = route(Request("GET", "/cats/"), Response(), lambda req, resp: resp)
        assert response.text == "ok"

    def test_repr(self) -> None:
        route = Route("/cats/", RouteKind.STATIC, _target(), "/cats/")
        assert "STATIC" in repr(route)
        assert "/cats/" in repr(route)


class TestRouteMatch:
    def test_creation(self) -> None:
        route = Route("/cats/", RouteKind.STATIC, _target(), "/cats/")
        match = RouteMatch(route=route, path_variables={"id": "42"})
        assert match.route is route
        assert match.path_variables == {"id": "42"}

    def test_frozen(self) -> None:
        route = Route("/cats/", RouteKind.STATIC, _target(), "/cats/")
        match = RouteMatch(route=route, path_variables={})
        with pytest.raises(AttributeError):
            match.route = route  # type: ignore[misc]
