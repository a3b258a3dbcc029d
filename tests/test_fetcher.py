# File: tests/test_fetcher.py
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import ClientSession, ClientTimeout, web

from essence.config import ViewerConfig
from essence.errors import FetchTimeoutError, HTTPStatusError, NetworkError
from essence.fetch.fetcher import MAX_RAW_LEN, Fetcher


# --------------------------------------------------------------------------- #
#                               Helper utilities                              #
# --------------------------------------------------------------------------- #


async def _serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app, shutdown_timeout=1.0)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


async def fetch(url: str, config: ViewerConfig):
    async with ClientSession(
        timeout=ClientTimeout(total=config.timeout),
        headers={"User-Agent": config.user_agent},
    ) as session:
        return await Fetcher(session, config).fetch(url)


# --------------------------------------------------------------------------- #
#                            Test-server fixtures                             #
# --------------------------------------------------------------------------- #


@pytest_asyncio.fixture
async def server(unused_tcp_port: int) -> AsyncIterator[str]:
    app = web.Application()

    async def handle_text(_):
        return web.Response(text="line1\nline2", content_type="text/plain")

    async def handle_old(_):
        raise web.HTTPFound("/text")

    async def handle_missing(_):
        return web.Response(status=404, text="gone")

    async def handle_slow(_):
        await asyncio.sleep(1.0)
        return web.Response(text="late")

    async def handle_video(_):
        return web.Response(body=b"\x00" * 4096, content_type="video/mp4")

    async def handle_big_text(_):
        return web.Response(body=b"x" * (MAX_RAW_LEN + 4096), content_type="text/plain")

    async def handle_big_html(_):
        return web.Response(body=b"<p>" + b"x" * MAX_RAW_LEN + b"</p>", content_type="text/html")

    async def handle_agent(request):
        return web.Response(text=request.headers.get("User-Agent", ""), content_type="text/plain")

    app.router.add_get("/text", handle_text)
    app.router.add_get("/old", handle_old)
    app.router.add_get("/missing", handle_missing)
    app.router.add_get("/slow", handle_slow)
    app.router.add_get("/video", handle_video)
    app.router.add_get("/agent", handle_agent)
    app.router.add_get("/big.txt", handle_big_text)
    app.router.add_get("/big.html", handle_big_html)

    async for url in _serve_app(app, unused_tcp_port):
        yield url


# --------------------------------------------------------------------------- #
#                                   Tests                                     #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_fetch_text(server: str):
    resource = await fetch(f"{server}/text", ViewerConfig())
    assert resource.body == b"line1\nline2"
    assert resource.mime_type == "text/plain"
    assert resource.final_url == f"{server}/text"


@pytest.mark.asyncio()
async def test_redirect_reports_final_url(server: str):
    resource = await fetch(f"{server}/old", ViewerConfig())
    assert resource.final_url == f"{server}/text"
    assert resource.body == b"line1\nline2"


@pytest.mark.asyncio()
async def test_redirects_disabled(server: str):
    with pytest.raises(HTTPStatusError) as excinfo:
        await fetch(f"{server}/old", ViewerConfig(max_redirects=0))
    assert excinfo.value.status == 302


@pytest.mark.asyncio()
async def test_http_status_error(server: str):
    with pytest.raises(HTTPStatusError) as excinfo:
        await fetch(f"{server}/missing", ViewerConfig())
    assert excinfo.value.status == 404


@pytest.mark.asyncio()
async def test_timeout(server: str):
    with pytest.raises(FetchTimeoutError):
        await fetch(f"{server}/slow", ViewerConfig(timeout=0.2))


@pytest.mark.asyncio()
async def test_connection_refused(unused_tcp_port_factory):
    port = unused_tcp_port_factory()
    with pytest.raises(NetworkError):
        await fetch(f"http://localhost:{port}/", ViewerConfig(timeout=2.0))


@pytest.mark.asyncio()
async def test_streams_are_not_downloaded(server: str):
    resource = await fetch(f"{server}/video", ViewerConfig())
    assert resource.mime_type == "video/mp4"
    assert resource.body == b""


@pytest.mark.asyncio()
async def test_user_agent_sent(server: str):
    resource = await fetch(f"{server}/agent", ViewerConfig(user_agent="TestAgent/1.0"))
    assert resource.body == b"TestAgent/1.0"


@pytest.mark.asyncio()
async def test_raw_text_is_capped(server: str):
    resource = await fetch(f"{server}/big.txt", ViewerConfig())
    assert len(resource.body) == MAX_RAW_LEN


@pytest.mark.asyncio()
async def test_html_is_not_capped(server: str):
    resource = await fetch(f"{server}/big.html", ViewerConfig())
    assert len(resource.body) == MAX_RAW_LEN + len(b"<p></p>")
