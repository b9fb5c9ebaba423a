"""Tests for switchyard.router — registration, hook stages, nesting."""

import pytest

from switchyard.config import RouterConfig
from switchyard.errors import ConfigurationError, Forbidden, InvalidRouteTarget, NotFound
from switchyard.http.request import Request
from switchyard.http.response import Response
from switchyard.middleware.prep import ContentLengthPrep, HeadPrep
from switchyard.router import Router, error_response
from switchyard.routing.method_map import MethodMap
from switchyard.routing.route import RouteKind
from switchyard.testing import TestClient


def _body(text: str):
    def handler(request, response, next):  # noqa: A002
        return response.with_body(text)

    return handler


def _recorder(tag: str, log: list[str]):
    def hook(request, response, next):  # noqa: A002
        log.append(tag)
        return next(request, response)

    return hook


class TestRegistration:
    def test_add_classifies_target(self) -> None:
        router = Router()
        assert router.add("/cats/", _body("a")).kind is RouteKind.STATIC
        assert router.add("/cats/*", _body("b")).kind is RouteKind.PREFIX
        assert router.add("/cats/{id}", _body("c")).kind is RouteKind.TEMPLATE
        assert router.add("~/dogs/([0-9]+)~", _body("d")).kind is RouteKind.PATTERN
        assert [r.target for r in router.routes] == ["/cats/", "/cats/*", "/cats/{id}", "~/dogs/([0-9]+)~"]

    def test_mapping_becomes_method_map(self) -> None:
        router = Router(RouterConfig(list_allowed_methods=False))
        route = router.add("/cats/", {"GET": _body("list")})
        assert isinstance(route.dispatchable, MethodMap)
        assert route.dispatchable.list_allowed_methods is False

    def test_allow_setting_reaches_nested_mappings(self) -> None:
        def auth(request, response, next):  # noqa: A002
            return next(request, response)

        router = Router(RouterConfig(list_allowed_methods=False))
        router.add("/cats/", [auth, {"GET": _body("list")}])
        router.set_status_handler(405, [{"PATCH": _body("patched")}])

        response = TestClient(router).put("/cats/")
        assert response.status == 405
        assert not response.has_header("Allow")
        assert response.text == "Method Not Allowed"

    def test_same_target_twice_is_one_route(self) -> None:
        router = Router()
        router.register("GET", "/cats/", _body("list"))
        router.register("POST", "/cats/", _body("create"))

        assert len(router.routes) == 1
        assert router.routes[0].methods == ("GET", "POST")
        client = TestClient(router)
        assert client.get("/cats/").text == "list"
        assert client.post("/cats/").text == "create"

    def test_decorator(self) -> None:
        router = Router()

        @router.route("/cats/{id}", methods="GET")
        def show(request, response, next):  # noqa: A002
            return f"cat {request.get_attribute('id')}"

        assert show.__name__ == "show"
        assert TestClient(router).get("/cats/42").text == "cat 42"

    def test_decorator_without_methods_serves_all(self) -> None:
        router = Router()

        @router.route("/ping")
        def ping(request, response, next):  # noqa: A002
            return "pong"

        assert TestClient(router).delete("/ping").text == "pong"

    def test_extra_pattern(self) -> None:
        router = Router()
        router.add("/cats/{id}", _body("cat"), "[0-9]+")
        client = TestClient(router)
        assert client.get("/cats/42").status == 200
        assert client.get("/cats/tom").status == 404

    def test_configured_default_pattern(self) -> None:
        router = Router(RouterConfig(default_variable_pattern="[a-z]+"))
        router.add("/cats/{name}", _body("cat"))
        assert router.match("/cats/tom") is not None
        assert router.match("/cats/42") is None

    def test_bad_template_fails_at_registration(self) -> None:
        with pytest.raises(InvalidRouteTarget):
            Router().add("/cats/{id}/{id}", _body("x"))

    def test_bad_hook_fails_at_registration(self) -> None:
        with pytest.raises(ConfigurationError):
            Router().add_pre_route_hook(42)


class TestMatchingThroughRouter:
    def test_template_variable_reaches_handler(self) -> None:
        router = Router()
        router.add("/cats/{id}", lambda req, resp, nxt: req.get_attribute("id"))
        client = TestClient(router)
        assert client.get("/cats/42").text == "42"
        assert client.get("/cats/").status == 404

    def test_put_on_get_only_is_405(self) -> None:
        router = Router()
        router.add("/cats/", {"GET": _body("list")})
        response = TestClient(router).put("/cats/")
        assert response.status == 405
        assert response.get_header("Allow") == "GET, HEAD, OPTIONS"
        assert response.text == "Method not allowed. Allowed methods: GET, HEAD, OPTIONS"

    def test_longest_prefix(self) -> None:
        router = Router()
        router.add("/a/*", _body("short"))
        router.add("/a/b/*", _body("long"))
        client = TestClient(router)
        assert client.get("/a/b/c").text == "long"
        assert client.get("/a/x").text == "short"

    def test_match_returns_same_route(self) -> None:
        router = Router()
        router.add("/cats/{id}", _body("cat"))
        assert router.match("/cats/1").route is router.match("/cats/2").route


class TestHookStages:
    def test_stage_order(self) -> None:
        log: list[str] = []
        router = Router()
        router.add("/cats/", lambda req, resp, nxt: (log.append("route"), "cats")[1])
        router.add_pre_route_hook(_recorder("pre", log))
        router.add_post_route_hook(_recorder("post", log))
        router.add_response_preparation_hook(_recorder("prep", log))
        router.set_status_handler(200, _recorder("status", log))

        response = TestClient(router).get("/cats/")
        assert response.text == "cats"
        assert log == ["pre", "route", "status", "post", "prep"]

    def test_post_and_prep_run_after_http_error(self) -> None:
        log: list[str] = []

        def forbidden(request, response, next):  # noqa: A002
            raise Forbidden()

        router = Router()
        router.add("/secret/", forbidden)
        router.add_post_route_hook(_recorder("post", log))
        router.add_response_preparation_hook(_recorder("prep", log))

        response = TestClient(router).get("/secret/")
        assert response.status == 403
        assert response.text == "Forbidden"
        assert response.get_header("Content-Length") == "9"
        assert log == ["post", "prep"]

    def test_pre_hook_request_carries_forward(self) -> None:
        def tag(request, response, next):  # noqa: A002
            return next(request.with_attribute("user", "tom"), response)

        router = Router()
        router.add("/me/", lambda req, resp, nxt: req.get_attribute("user"))
        router.add_pre_route_hook(tag)
        assert TestClient(router).get("/me/").text == "tom"

    def test_pre_hook_can_rewrite_path(self) -> None:
        def rewrite(request, response, next):  # noqa: A002
            return next(request.with_target("/new/"), response)

        router = Router()
        router.add("/new/", _body("new"))
        router.add_pre_route_hook(rewrite)
        assert TestClient(router).get("/old/").text == "new"

    def test_hook_that_skips_next_still_continues_pipeline(self) -> None:
        router = Router()
        router.add("/cats/", _body("cats"))
        router.add_pre_route_hook(lambda req, resp, nxt: resp.with_header("X-Pre", "1"))
        response = TestClient(router).get("/cats/")
        assert response.text == "cats"
        assert response.get_header("X-Pre") == "1"

    def test_status_handler_for_404(self) -> None:
        router = Router()
        router.set_status_handler(404, _body("nothing here"))
        response = TestClient(router).get("/missing/")
        assert response.status == 404
        assert response.text == "nothing here"

    def test_status_handler_sees_raised_error(self) -> None:
        def missing(request, response, next):  # noqa: A002
            raise NotFound("no such cat")

        router = Router()
        router.add("/cats/{id}", missing)
        router.set_status_handler(404, lambda req, resp, nxt: resp.with_body(f"[{resp.text}]"))
        assert TestClient(router).get("/cats/9").text == "[no such cat]"

    def test_default_preparation_hooks(self) -> None:
        hooks = Router().response_preparation_hooks
        assert isinstance(hooks[0].source, ContentLengthPrep)
        assert isinstance(hooks[1].source, HeadPrep)

    def test_remove_preparation_hook_by_class(self) -> None:
        router = Router()
        router.add("/cats/", _body("cats"))
        router.remove_response_preparation_hook(HeadPrep)
        assert len(router.response_preparation_hooks) == 1
        assert TestClient(router).head("/cats/").text == "cats"

    def test_remove_unknown_hook(self) -> None:
        with pytest.raises(ValueError):
            Router().remove_response_preparation_hook(_body("x"))

    def test_head_keeps_length_drops_body(self) -> None:
        router = Router()
        router.add("/cats/", {"GET": _body("four")})
        response = TestClient(router).head("/cats/")
        assert response.status == 200
        assert response.body == b""
        assert response.get_header("Content-Length") == "4"


class TestNotFound:
    def test_404_without_next(self) -> None:
        calls: list[str] = []

        def next_(request: Request, response: Response) -> Response:
            calls.append("next")
            return response

        router = Router()
        router.add("/cats/", _body("cats"))
        response = router.dispatch(Request("GET", "/dogs/"), Response(), next_)
        assert response.status == 404
        assert calls == []

    def test_continue_on_not_found(self) -> None:
        calls: list[str] = []

        def next_(request: Request, response: Response) -> Response:
            calls.append("next")
            return response.with_body("fallback")

        router = Router(RouterConfig(continue_on_not_found=True))
        router.add("/cats/", _body("cats"))
        response = router.dispatch(Request("GET", "/dogs/"), Response(), next_)
        assert response.text == "fallback"
        assert calls == ["next"]


class TestNesting:
    def test_router_as_route_target(self) -> None:
        api = Router(RouterConfig(continue_on_not_found=True))
        api.add("/api/cats/{id}", {"GET": lambda req, resp, nxt: f"cat {req.get_attribute('id')}"})

        site = Router()
        site.add("/api/*", api)
        site.add("/", _body("home"))

        client = TestClient(site)
        assert client.get("/api/cats/5").text == "cat 5"
        assert client.get("/").text == "home"

    def test_inner_miss_falls_through_to_outer_next(self) -> None:
        inner = Router(RouterConfig(continue_on_not_found=True))
        inner.add("/cats/", _body("inner cats"))

        outer = Router()
        outer.add_middleware(inner)
        outer.add("/dogs/", _body("outer dogs"))

        client = TestClient(outer)
        assert client.get("/dogs/").text == "outer dogs"

    def test_router_in_chain(self) -> None:
        inner = Router(RouterConfig(continue_on_not_found=True))
        inner.add("/cats/", _body("inner"))

        outer = Router()
        outer.add("/cats/", [inner, _body("never")])
        outer.add("/dogs/", [inner, _body("fallback")])

        client = TestClient(outer)
        assert client.get("/cats/").text == "inner"
        assert client.get("/dogs/").text == "fallback"

    def test_outer_status_handler_sets_final_length(self) -> None:
        inner = Router()
        inner.add("/api/cats/", _body("cats"))

        outer = Router()
        outer.add("/api/*", inner)
        outer.set_status_handler(404, lambda req, resp, nxt: "Page not found")

        response = TestClient(outer).get("/api/dogs/")
        assert response.status == 404
        assert response.text == "Page not found"
        assert response.get_header("Content-Length") == "14"
        assert response.get_header_list("Content-Length") == ["14"]

    def test_outer_post_hook_sets_final_length(self) -> None:
        inner = Router()
        inner.add("/api/cats/", _body("cats"))

        outer = Router()
        outer.add("/api/*", inner)
        def footer(request, response, next):  # noqa: A002
            return next(request, response.with_body(response.text + " + footer"))

        outer.add_post_route_hook(footer)

        response = TestClient(outer).get("/api/cats/")
        assert response.text == "cats + footer"
        assert response.get_header("Content-Length") == "13"

    def test_nested_router_leaves_preparation_to_caller(self) -> None:
        inner = Router()
        inner.add("/cats/", _body("cats"))

        nested = inner(Request("GET", "/cats/"), Response(), lambda req, resp: resp)
        assert not nested.has_header("Content-Length")
        assert inner.dispatch(Request("GET", "/cats/")).get_header("Content-Length") == "4"

    def test_head_through_nested_router(self) -> None:
        inner = Router()
        inner.add("/api/cats/", {"GET": _body("cats")})

        outer = Router()
        outer.add("/api/*", inner)

        response = TestClient(outer).head("/api/cats/")
        assert response.body == b""
        assert response.get_header("Content-Length") == "4"


class TestErrorResponse:
    def test_carries_headers(self) -> None:
        from switchyard.errors import MethodNotAllowed

        response = error_response(MethodNotAllowed(("PUT", "GET")), Response("old"))
        assert response.status == 405
        assert response.text == "Method Not Allowed"
        assert response.get_header("Allow") == "GET, PUT"
