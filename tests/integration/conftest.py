"""Fixtures for integration tests: local stand-ins for the feed and the webhook."""
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

SESSION_COOKIE = "ew_session"


@pytest_asyncio.fixture
async def whispers_site(cnc_dict, hca_dict):
    """Feed server. Set site["results"] to change what the API returns."""
    site = {"results": [hca_dict, cnc_dict], "api_calls": 0}

    async def news(request):
        response = web.Response(text="<html>news</html>", content_type="text/html")
        response.set_cookie(SESSION_COOKIE, "warm")
        return response

    async def results(request):
        site["api_calls"] += 1
        if request.cookies.get(SESSION_COOKIE) != "warm":
            return web.Response(status=403)
        if request.headers.get("X-Requested-With") != "XMLHttpRequest":
            return web.Response(status=400)
        return web.json_response(site["results"])

    app = web.Application()
    app.router.add_get("/earningsnews", news)
    app.router.add_get("/api/todaysresults", results)

    server = TestServer(app)
    await server.start_server()
    site["base_url"] = str(server.make_url("")).rstrip("/")
    yield site
    await server.close()


@pytest_asyncio.fixture
async def discord_webhook():
    """Webhook server. Set hook["fail_on"] to fail the Nth post (1-indexed)."""
    hook = {"embeds": [], "attempts": 0, "fail_on": None}

    async def execute(request):
        hook["attempts"] += 1
        if hook["attempts"] == hook["fail_on"]:
            return web.json_response({"message": "Internal Server Error"}, status=500)
        body = await request.json()
        hook["embeds"].extend(body["embeds"])
        return web.json_response({"id": str(hook["attempts"])})

    app = web.Application()
    app.router.add_post("/api/webhooks/1/token", execute)

    server = TestServer(app)
    await server.start_server()
    hook["url"] = str(server.make_url("/api/webhooks/1/token"))
    yield hook
    await server.close()
