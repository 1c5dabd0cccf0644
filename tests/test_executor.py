import asyncio

import aiohttp
from aiohttp import web
from aiohttp.test_utils import TestServer, unused_port

from httpstress.executor import RequestExecutor
from httpstress.models import FAILURE_STATUS, RequestSpec
from httpstress.utils import USER_AGENT


def make_app(seen: list) -> web.Application:
    async def echo(request):
        seen.append(
            {
                "method": request.method,
                "user_agents": request.headers.getall("User-Agent", []),
                "content_type": request.headers.get("Content-Type"),
                "custom": request.headers.get("X-Custom"),
                "body": await request.text(),
            }
        )
        return web.Response(text="x" * 1024)

    async def missing(request):
        return web.Response(status=404)

    async def unavailable(request):
        return web.Response(status=503)

    app = web.Application()
    app.router.add_route("*", "/echo", echo)
    app.router.add_get("/missing", missing)
    app.router.add_get("/unavailable", unavailable)
    return app


def execute(path: str, method: str = "GET", body: str = "", headers=None, seen=None):
    seen = seen if seen is not None else []

    async def scenario():
        server = TestServer(make_app(seen))
        await server.start_server()
        try:
            spec = RequestSpec(
                method=method,
                url=str(server.make_url(path)),
                body=body,
                headers=headers or {},
            )
            async with aiohttp.ClientSession() as session:
                return await RequestExecutor(session).execute(spec, 0)
        finally:
            await server.close()

    return asyncio.run(scenario())


def test_success_sets_status_and_duration():
    seen = []
    outcome = execute("/echo", seen=seen)
    assert outcome.status == 200
    assert outcome.duration > 0
    assert not outcome.failed
    assert seen[0]["user_agents"] == [USER_AGENT]


def test_error_statuses_are_not_failures():
    assert execute("/missing").status == 404
    assert execute("/unavailable").status == 503


def test_body_is_sent_with_json_content_type():
    seen = []
    outcome = execute("/echo", method="POST", body='{"a": 1}', seen=seen)
    assert outcome.status == 200
    assert seen[0]["method"] == "POST"
    assert seen[0]["body"] == '{"a": 1}'
    assert seen[0]["content_type"] == "application/json"


def test_caller_headers_override_defaults():
    seen = []
    execute(
        "/echo",
        method="PUT",
        body="plain",
        headers={"user-agent": "custom-agent", "Content-Type": "text/plain", "X-Custom": "1"},
        seen=seen,
    )
    assert seen[0]["user_agents"] == ["custom-agent"]
    assert seen[0]["content_type"] == "text/plain"
    assert seen[0]["custom"] == "1"


def test_head_request():
    seen = []
    assert execute("/echo", method="HEAD", seen=seen).status == 200
    assert seen[0]["method"] == "HEAD"


def test_connection_refused_is_failure():
    async def scenario():
        spec = RequestSpec(method="GET", url=f"http://127.0.0.1:{unused_port()}/")
        async with aiohttp.ClientSession() as session:
            return await RequestExecutor(session).execute(spec, 3)

    outcome = asyncio.run(scenario())
    assert outcome.status == FAILURE_STATUS
    assert outcome.index == 3
    assert outcome.duration >= 0


def test_malformed_url_is_failure():
    async def scenario():
        spec = RequestSpec(method="GET", url="not a url")
        async with aiohttp.ClientSession() as session:
            return await RequestExecutor(session).execute(spec, 0)

    outcome = asyncio.run(scenario())
    assert outcome.failed
    assert outcome.duration >= 0


def test_duration_stops_when_headers_arrive():
    async def slow_body(request):
        resp = web.StreamResponse()
        await resp.prepare(request)
        await resp.write(b"first chunk")
        await asyncio.sleep(0.5)
        await resp.write(b"second chunk")
        return resp

    async def scenario():
        app = web.Application()
        app.router.add_get("/slow-body", slow_body)
        server = TestServer(app)
        await server.start_server()
        try:
            spec = RequestSpec(method="GET", url=str(server.make_url("/slow-body")))
            async with aiohttp.ClientSession() as session:
                return await RequestExecutor(session).execute(spec, 0)
        finally:
            await server.close()

    outcome = asyncio.run(scenario())
    assert outcome.status == 200
    assert outcome.duration < 0.3


def test_timeout_duration_covers_time_until_failure():
    async def stalled(request):
        await asyncio.sleep(1)
        return web.Response(text="too late")

    async def scenario():
        app = web.Application()
        app.router.add_get("/stalled", stalled)
        server = TestServer(app)
        await server.start_server()
        try:
            spec = RequestSpec(method="GET", url=str(server.make_url("/stalled")))
            timeout = aiohttp.ClientTimeout(total=0.2)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                return await RequestExecutor(session).execute(spec, 0)
        finally:
            await server.close()

    outcome = asyncio.run(scenario())
    assert outcome.failed
    assert 0.15 < outcome.duration < 0.5


def test_unexpected_error_becomes_failure():
    class BrokenSession:
        def request(self, *args, **kwargs):
            raise LookupError("boom")

    spec = RequestSpec(method="GET", url="http://stub.invalid/")
    outcome = asyncio.run(RequestExecutor(BrokenSession()).execute(spec, 5))
    assert outcome.failed
    assert outcome.index == 5
