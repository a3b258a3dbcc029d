# essence/fetch/fetcher.py
"""
Fetcher module: one GET per call, redirects followed, timeout enforced, no retries.
"""
from __future__ import annotations

import asyncio

from aiohttp import ClientError, ClientResponse, ClientSession, ClientTimeout

from essence.config import ViewerConfig
from essence.errors import FetchTimeoutError, HTTPStatusError, NetworkError
from essence.logger import logger
from essence.models import FetchedResource


STREAMED_TYPES = ("video/", "audio/", "application/vnd.apple.mpegurl")

# raw text bodies (pastes, plain files) are cut at this many bytes
MAX_RAW_LEN = 1024 * 1024

def _mime(content_type: str | None) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


def _is_streamed(content_type: str | None) -> bool:
    return _mime(content_type).startswith(STREAMED_TYPES)


def _is_raw_text(content_type: str | None) -> bool:
    mime = _mime(content_type)
    return mime.startswith("text/") and mime != "text/html"


async def _read_capped(resp: ClientResponse, limit: int) -> bytes:
    chunks: list[bytes] = []
    size = 0
    async for chunk in resp.content.iter_chunked(64 * 1024):
        chunk = chunk[: limit - size]
        chunks.append(chunk)
        size += len(chunk)
        if size >= limit:
            logger.debug("Body of %s cut at %d bytes", resp.url, limit)
            break
    return b"".join(chunks)


class Fetcher:
    """Retrieves a single resource; every failure is terminal."""

    def __init__(self, session: ClientSession, config: ViewerConfig) -> None:
        self.session = session
        self.config = config

    async def fetch(self, url: str) -> FetchedResource:
        """
        GET *url* and return its body with the post-redirect URL.

        Raises FetchTimeoutError, NetworkError or HTTPStatusError.
        """
        logger.debug("GET %s", url)
        try:
            async with self.session.get(
                url,
                allow_redirects=self.config.max_redirects > 0,
                max_redirects=max(self.config.max_redirects, 1),
                raise_for_status=False,
            ) as resp:
                final_url = str(resp.url)
                if not 200 <= resp.status < 300:
                    raise HTTPStatusError(final_url, resp.status)
                ctype = resp.headers.get("Content-Type")
                if _is_streamed(ctype):
                    # players stream from the URL themselves
                    body = b""
                elif _is_raw_text(ctype):
                    body = await _read_capped(resp, MAX_RAW_LEN)
                else:
                    body = await resp.read()
        except asyncio.TimeoutError as exc:
            raise FetchTimeoutError(url, self.config.timeout) from exc
        except ClientError as exc:
            raise NetworkError(url, str(exc) or type(exc).__name__) from exc

        if final_url != url:
            logger.debug("Redirected %s -> %s", url, final_url)
        logger.debug("Fetched %d bytes of %s", len(body), ctype or "undeclared type")
        return FetchedResource(final_url=final_url, content_type=ctype, body=body)


def fetch_url(url: str, config: ViewerConfig) -> FetchedResource:
    """Synchronous entry point: owns the session and the event loop for one fetch."""

    async def _runner() -> FetchedResource:
        async with ClientSession(
            timeout=ClientTimeout(total=config.timeout),
            headers={"User-Agent": config.user_agent},
        ) as session:
            return await Fetcher(session, config).fetch(url)

    return asyncio.run(_runner())
