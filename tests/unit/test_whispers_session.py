"""Tests for WhispersSessionClient against a local aiohttp server."""
import aiohttp
import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

pytestmark = pytest.mark.asyncio

SESSION_COOKIE = "ew_session"


@pytest_asyncio.fixture
async def upstream(cnc_dict, hca_dict):
    """Fake Earnings Whispers site that only serves the API to warmed sessions."""
    behaviour = {
        "warmup_status": 200,
        "results": [cnc_dict, hca_dict],
        "raw_body": None,
        "requests": [],
    }

    async def news(request):
        behaviour["requests"].append(("news", request.headers.copy(), dict(request.cookies)))
        response = web.Response(
            text="<html>news</html>", content_type="text/html", status=behaviour["warmup_status"]
        )
        response.set_cookie(SESSION_COOKIE, "abc123")
        return response

    async def results(request):
        behaviour["requests"].append(("results", request.headers.copy(), dict(request.cookies)))
        if request.cookies.get(SESSION_COOKIE) != "abc123":
            return web.Response(status=403, text="Forbidden")
        if behaviour["raw_body"] is not None:
            return web.Response(text=behaviour["raw_body"], content_type="application/json")
        return web.json_response(behaviour["results"])

    app = web.Application()
    app.router.add_get("/earningsnews", news)
    app.router.add_get("/api/todaysresults", results)

    server = TestServer(app)
    await server.start_server()
    behaviour["base_url"] = str(server.make_url("")).rstrip("/")
    yield behaviour
    await server.close()


def make_client(base_url, **kwargs):
    from whisper_relay.collectors.whispers.session import WhispersSessionClient
    from whisper_relay.core.config import SourceConfig

    config = SourceConfig(base_url=base_url, timeout_seconds=5)
    # Local test server is addressed by IP, which the default jar refuses to store cookies for
    return WhispersSessionClient(config, cookie_jar=aiohttp.CookieJar(unsafe=True), **kwargs)


async def test_fetch_reports_returns_records_in_feed_order(upstream):
    client = make_client(upstream["base_url"])
    try:
        reports = await client.fetch_reports()
    finally:
        await client.close()

    assert [r.ticker for r in reports] == ["CNC", "HCA"]
    assert reports[0].revenue == 48742.0


async def test_warmup_precedes_data_request_and_shares_cookies(upstream):
    client = make_client(upstream["base_url"])
    try:
        await client.fetch_reports()
    finally:
        await client.close()

    (first, _, _), (second, _, cookies) = upstream["requests"]
    assert first == "news"
    assert second == "results"
    assert cookies == {SESSION_COOKIE: "abc123"}


async def test_request_headers(upstream):
    client = make_client(upstream["base_url"])
    try:
        await client.fetch_reports()
    finally:
        await client.close()

    (_, news_headers, _), (_, api_headers, _) = upstream["requests"]
    assert news_headers["User-Agent"].startswith("Mozilla/5.0")
    assert news_headers["Accept"].startswith("text/html")

    assert api_headers["X-Requested-With"] == "XMLHttpRequest"
    assert api_headers["Referer"] == upstream["base_url"] + "/earningsnews"
    assert api_headers["Cache-Control"] == "no-cache"
    assert api_headers["Pragma"] == "no-cache"
    assert api_headers["Accept"].startswith("application/json")


async def test_data_request_without_cookies_fails():
    """Without an IP-capable jar no cookie survives, and the API refuses the request."""
    from whisper_relay.collectors.whispers.session import WhispersSessionClient
    from whisper_relay.core.config import SourceConfig
    from whisper_relay.core.errors import FetchError

    async def news(request):
        response = web.Response(text="<html></html>", content_type="text/html")
        response.set_cookie(SESSION_COOKIE, "abc123")
        return response

    async def results(request):
        if SESSION_COOKIE not in request.cookies:
            return web.Response(status=403)
        return web.json_response([])

    app = web.Application()
    app.router.add_get("/earningsnews", news)
    app.router.add_get("/api/todaysresults", results)
    server = TestServer(app)
    await server.start_server()

    client = WhispersSessionClient(
        SourceConfig(base_url=str(server.make_url("")).rstrip("/"), timeout_seconds=5)
    )
    try:
        with pytest.raises(FetchError, match="HTTP 403"):
            await client.fetch_reports()
    finally:
        await client.close()
        await server.close()


async def test_warmup_failure_raises_fetch_error(upstream):
    from whisper_relay.core.errors import FetchError

    upstream["warmup_status"] = 503
    client = make_client(upstream["base_url"])
    try:
        with pytest.raises(FetchError, match="HTTP 503"):
            await client.fetch_reports()
    finally:
        await client.close()

    assert [name for name, _, _ in upstream["requests"]] == ["news"]


@pytest.mark.parametrize("body", ['{"results": []}', "not json", ""])
async def test_unusable_body_raises_fetch_error(upstream, body):
    from whisper_relay.core.errors import FetchError

    upstream["raw_body"] = body
    client = make_client(upstream["base_url"])
    try:
        with pytest.raises(FetchError, match="Unusable response"):
            await client.fetch_reports()
    finally:
        await client.close()


async def test_connection_refused_raises_fetch_error():
    from whisper_relay.core.errors import FetchError

    server = TestServer(web.Application())
    await server.start_server()
    base_url = str(server.make_url("")).rstrip("/")
    await server.close()

    client = make_client(base_url)
    try:
        with pytest.raises(FetchError, match="failed"):
            await client.fetch_reports()
    finally:
        await client.close()


async def test_close_is_idempotent_and_safe_before_use():
    client = make_client("http://127.0.0.1:1")

    await client.close()
    await client.close()
