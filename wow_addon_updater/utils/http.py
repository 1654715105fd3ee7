"""
Small HTTP helpers shared by the update sources.
"""

from typing import Any

import aiohttp
from bs4 import BeautifulSoup


def ensure_scheme(url: str) -> str:
    """Addon URLs may be written without a scheme in the config file."""
    if url.startswith(("http://", "https://")):
        return url
    return f"https://{url}"


async def fetch_html(session: aiohttp.ClientSession, url: str) -> BeautifulSoup:
    """Fetches a page and parses it, raising on non-2xx responses."""
    async with session.get(ensure_scheme(url)) as response:
        response.raise_for_status()
        html = await response.text()
    return BeautifulSoup(html, "html.parser")


async def fetch_json(
    session: aiohttp.ClientSession,
    url: str,
    params: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
) -> Any:
    """Fetches a JSON document, ignoring a misleading Content-Type header."""
    async with session.get(url, params=params, headers=headers) as response:
        response.raise_for_status()
        return await response.json(content_type=None)
