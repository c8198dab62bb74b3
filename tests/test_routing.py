"""Tests for crust.routing: the handler chain, the route table and dispatch."""

from typing import Any

import pytest

from crust.errors import BodyDecodeError, ConfigurationError, NotFound
from crust.http.headers import Headers
from crust.http.query import QueryParams
from crust.http.request import Request
from crust.http.response import ResponseWriter
from crust.routing import Router, decode_body, run_chain
from crust.sessions import SessionStore


def _request(
    method: str = "GET",
    path: str = "/",
    body: bytes = b"",
    headers: dict[str, str] | None = None,
) -> Request:
    return Request(
        method=method,
        path=path,
        headers=Headers.from_dict(headers or {}),
        query=QueryParams(b""),
        raw_body=body,
    )


class TestRunChain:
    async def test_sync_handlers_advance(self) -> None:
        calls: list[str] = []

        def first(request: Any, response: Any, next: Any) -> None:
            calls.append("first")
            next()

        def second(request: Any, response: Any, next: Any) -> None:
            calls.append("second")
            response.send("done")

        writer = ResponseWriter()
        await run_chain([first, second], _request(), writer)
        assert calls == ["first", "second"]
        assert writer.response is not None

    async def test_async_handlers_run_inline(self) -> None:
        calls: list[str] = []

        async def outer(request: Any, response: Any, next: Any) -> None:
            calls.append("before")
            await next()
            calls.append("after")

        async def inner(request: Any, response: Any, next: Any) -> None:
            calls.append("inner")

        await run_chain([outer, inner], _request(), ResponseWriter())
        assert calls == ["before", "inner", "after"]

    async def test_handler_that_never_advances_stops_the_chain(self) -> None:
        calls: list[int] = []

        def make(k: int, advance: bool):
            def handler(request: Any, response: Any, next: Any) -> None:
                calls.append(k)
                if advance:
                    next()

            return handler

        handlers = [make(0, True), make(1, True), make(2, False), make(3, True), make(4, True)]
        await run_chain(handlers, _request(), ResponseWriter())
        assert calls == [0, 1, 2]

    async def test_next_advances_at_most_once(self) -> None:
        calls: list[str] = []

        async def greedy(request: Any, response: Any, next: Any) -> None:
            await next()
            await next()
            next()

        def tail(request: Any, response: Any, next: Any) -> None:
            calls.append("tail")

        await run_chain([greedy, tail], _request(), ResponseWriter())
        assert calls == ["tail"]

    async def test_sync_handler_returning_next(self) -> None:
        calls: list[str] = []

        def passthrough(request: Any, response: Any, next: Any) -> Any:
            return next()

        def tail(request: Any, response: Any, next: Any) -> None:
            calls.append("tail")

        await run_chain([passthrough, tail], _request(), ResponseWriter())
        assert calls == ["tail"]

    async def test_index_past_end_is_a_no_op(self) -> None:
        await run_chain([], _request(), ResponseWriter())
        await run_chain([lambda *a: None], _request(), ResponseWriter(), index=5)

    async def test_non_callable_entry_ends_chain(self) -> None:
        calls: list[str] = []

        def first(request: Any, response: Any, next: Any) -> None:
            calls.append("first")
            next()

        def last(request: Any, response: Any, next: Any) -> None:
            calls.append("last")

        await run_chain([first, None, last], _request(), ResponseWriter())  # type: ignore[list-item]
        assert calls == ["first"]


class TestRouterRegistration:
    def test_has_route(self) -> None:
        router = Router(SessionStore())
        router.register("GET", "/pizzas", lambda *a: None)
        assert router.has_route("GET", "/pizzas")
        assert router.has_route("get", "/pizzas")
        assert not router.has_route("POST", "/pizzas")
        assert not router.has_route("GET", "/pizzas/")

    def test_empty_handler_list_is_not_a_route(self) -> None:
        router = Router(SessionStore())
        router.register("GET", "/empty")
        assert not router.has_route("GET", "/empty")
        assert router.lookup("GET", "/empty") is None

    def test_register_twice_replaces(self) -> None:
        def a(*args: Any) -> None: ...

        def b(*args: Any) -> None: ...

        def c(*args: Any) -> None: ...

        router = Router(SessionStore())
        router.register("POST", "/carts", a, b)
        router.register("POST", "/carts", c)
        assert router.lookup("POST", "/carts") == (c,)

    def test_pattern_segments_are_rejected(self) -> None:
        router = Router(SessionStore())
        with pytest.raises(ConfigurationError):
            router.register("GET", "/users/{id}", lambda *a: None)

    def test_empty_path_is_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            Router(SessionStore()).register("GET", "", lambda *a: None)

    def test_no_registration_after_compile(self) -> None:
        router = Router(SessionStore())
        router.compile()
        assert router.compiled
        with pytest.raises(ConfigurationError):
            router.register("GET", "/", lambda *a: None)

    def test_routes_are_sorted(self) -> None:
        router = Router(SessionStore())
        router.register("POST", "/b", lambda *a: None)
        router.register("GET", "/z", lambda *a: None)
        router.register("GET", "/a", lambda *a: None)
        assert [(m, p) for m, p, _ in router.routes] == [("GET", "/a"), ("GET", "/z"), ("POST", "/b")]


class TestDecodeBody:
    def test_empty(self) -> None:
        assert decode_body(_request("POST")) == {}

    def test_json(self) -> None:
        request = _request("POST", body=b'{"a": [1, 2]}', headers={"content-type": "application/json"})
        assert decode_body(request) == {"a": [1, 2]}

    def test_malformed_json(self) -> None:
        request = _request("POST", body=b"{nope", headers={"content-type": "application/json"})
        with pytest.raises(BodyDecodeError):
            decode_body(request)

    def test_form(self) -> None:
        request = _request(
            "POST",
            body=b"email=a%40bc.com&count=2&count=3",
            headers={"content-type": "application/x-www-form-urlencoded"},
        )
        assert decode_body(request) == {"email": "a@bc.com", "count": "2"}


class TestRouterProcess:
    async def test_session_cookie_is_always_set(self) -> None:
        sessions = SessionStore()
        router = Router(sessions)
        router.register("GET", "/", lambda req, res, nxt: res.send("hi"))
        writer = ResponseWriter()
        request = _request()
        await router.process(request, writer)

        assert request.session_id in sessions
        cookie = writer.response.cookies[0]
        assert cookie.name == "sessionId"
        assert cookie.value == request.session_id

    async def test_known_session_is_reused(self) -> None:
        sessions = SessionStore()
        session_id, session = sessions.get_or_create({})
        router = Router(sessions)
        router.register("GET", "/", lambda req, res, nxt: res.send("hi"))
        request = _request(headers={"cookie": f"sessionId={session_id}"})
        await router.process(request, ResponseWriter())
        assert request.session_id == session_id
        assert request.session is session

    async def test_unknown_post_is_not_found(self) -> None:
        with pytest.raises(NotFound):
            await Router(SessionStore()).process(_request("POST", "/nope"), ResponseWriter())

    async def test_unknown_get_without_static_root_is_not_found(self) -> None:
        writer = ResponseWriter()
        with pytest.raises(NotFound):
            await Router(SessionStore()).process(_request("GET", "/nope"), writer)
        assert [c.name for c in writer.pending_cookies] == ["sessionId"]

    async def test_body_is_decoded_for_writes(self) -> None:
        seen: list[Any] = []
        router = Router(SessionStore())
        router.register("PUT", "/me", lambda req, res, nxt: seen.append(req.body))
        request = _request("PUT", "/me", b'{"a": 1}', {"content-type": "application/json"})
        await router.process(request, ResponseWriter())
        assert seen == [{"a": 1}]

    async def test_body_is_not_decoded_for_reads(self) -> None:
        seen: list[Any] = []
        router = Router(SessionStore())
        router.register("DELETE", "/carts", lambda req, res, nxt: seen.append(req.body))
        request = _request("DELETE", "/carts", b'{"a": 1}', {"content-type": "application/json"})
        await router.process(request, ResponseWriter())
        assert seen == [{}]
