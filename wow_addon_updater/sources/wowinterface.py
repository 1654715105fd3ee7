"""
Update source for addons and interfaces hosted on wowinterface.com.
"""

import asyncio
import logging
import re
from pathlib import Path

import aiohttp

from wow_addon_updater.exceptions import InstallError, RemoteCheckError
from wow_addon_updater.media import ZipDownloader
from wow_addon_updater.utils.http import fetch_html

from .base import HTTPSource

log = logging.getLogger(__name__)

_VERSION_PREFIX = "Version: "
_INFO_PAGE_REGEX = re.compile(r"/info(?P<name>[^/]+)\.html$")


class WowInterfaceSource(HTTPSource):
    name = "WoWInterface"
    URL_PATTERN = re.compile(
        r"^(https?://)?(www\.)?wowinterface\.com/downloads/info.+\.html$"
    )
    BASE_URL = "https://www.wowinterface.com"

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        downloader: ZipDownloader | None = None,
        base_url: str | None = None,
    ):
        super().__init__(session, downloader)
        self.base_url = (base_url or self.BASE_URL).rstrip("/")

    async def get_latest_version(self, url: str) -> str:
        session = await self._get_session()
        try:
            soup = await fetch_html(session, url)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise RemoteCheckError(f"Failed to fetch {url}: {e}") from e

        element = soup.select_one("#version")
        text = element.get_text(strip=True) if element else ""
        if not text.startswith(_VERSION_PREFIX):
            raise RemoteCheckError(f"failed to find a version tag for: {url}")
        return text[len(_VERSION_PREFIX) :]

    async def download(self, url: str, dest_dir: str | Path) -> None:
        match = _INFO_PAGE_REGEX.search(url)
        if not match:
            raise InstallError(f"no path to extract from: {url}")

        session = await self._get_session()
        page_url = f"{self.base_url}/downloads/download{match.group('name')}"
        try:
            soup = await fetch_html(session, page_url)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise InstallError(f"Failed to fetch download page {page_url}: {e}") from e

        link = soup.select_one(".manuallink > a")
        if link is None or not link.get("href"):
            raise InstallError(f"failed to find download link for: {url}")
        await self.install_zip(link["href"], dest_dir)
