"""Shared HTTP utilities for search and sink adapters.

This module contains the SSL context, session factory and JSON POST
helper used by every outbound HTTP call so that timeouts and certificate
handling stay consistent.
"""

import ssl
from typing import Any

import aiohttp
import certifi

USER_AGENT = "scout/0.1"


def create_ssl_context() -> ssl.SSLContext:
    """SSL context backed by the certifi CA bundle."""
    return ssl.create_default_context(cafile=certifi.where())


def create_session(timeout: float) -> aiohttp.ClientSession:
    """Create an aiohttp session with the certifi bundle and a total timeout."""
    connector = aiohttp.TCPConnector(ssl=create_ssl_context())
    return aiohttp.ClientSession(
        connector=connector,
        timeout=aiohttp.ClientTimeout(total=timeout),
        headers={"User-Agent": USER_AGENT},
    )


async def post_json(
    url: str,
    payload: dict[str, Any],
    headers: dict[str, str] | None = None,
    timeout: float = 30.0,
) -> tuple[int, str]:
    """POST a JSON body and return the status and response text.

    Transport errors (DNS, connection reset, timeout) propagate as
    aiohttp.ClientError or asyncio.TimeoutError for the caller to translate.

    Returns:
        (HTTP status, response body text)
    """
    async with create_session(timeout) as session:
        async with session.post(url, json=payload, headers=headers) as resp:
            body = await resp.text()
            return resp.status, body
