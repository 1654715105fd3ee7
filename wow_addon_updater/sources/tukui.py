"""
Update source for addons hosted on tukui.org.
"""

import asyncio
import logging
import re
from pathlib import Path
from typing import NamedTuple

import aiohttp

from wow_addon_updater.exceptions import InstallError, RemoteCheckError
from wow_addon_updater.media import ZipDownloader
from wow_addon_updater.utils.http import ensure_scheme, fetch_html, fetch_json

from .base import HTTPSource

log = logging.getLogger(__name__)

_ID_REGEX = re.compile(r"id=[0-9]+")
_UI_REGEX = re.compile(r"ui=(?P<ui>.+)$")
_UI_ADDONS = ("tukui", "elvui")
_VERSION_SELECTOR = "#extras .extras:nth-of-type(1) > b.VIP:nth-of-type(1)"


class TukuiAddon(NamedTuple):
    version: str | None
    url: str | None


class TukuiSource(HTTPSource):
    """
    Handles regular addon pages (retail, classic and classic TBC) as well as
    the TukUI and ElvUI interface packages.
    """

    name = "Tukui"
    URL_PATTERN = re.compile(
        r"^(https?://)?(www\.)?tukui\.org/"
        r"(((classic-(tbc-)?)?addons\.php\?id=[0-9]+)|(download\.php\?ui=(tukui|elvui)))$"
    )
    API_URL = "https://www.tukui.org/api.php"

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        downloader: ZipDownloader | None = None,
        api_url: str | None = None,
    ):
        super().__init__(session, downloader)
        self.api_url = api_url or self.API_URL

    async def _get_addon(self, url: str) -> TukuiAddon:
        try:
            if _ID_REGEX.search(url):
                return await self._get_regular_addon(url)
            if _UI_REGEX.search(url):
                return await self._get_ui_addon(url)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise RemoteCheckError(f"Failed to query tukui.org for {url}: {e}") from e
        raise RemoteCheckError(f"tukui.org url {url} is not supported")

    async def _get_ui_addon(self, url: str) -> TukuiAddon:
        ui = _UI_REGEX.search(url).group("ui")
        if ui not in _UI_ADDONS:
            raise RemoteCheckError(f"given tukui.org ui addon link {url} is not supported")

        session = await self._get_session()
        data = await fetch_json(session, self.api_url, params={"ui": ui})
        if not isinstance(data, dict):
            raise RemoteCheckError(f"Unexpected tukui.org API response for '{ui}'.")
        return TukuiAddon(version=data.get("version"), url=data.get("url"))

    async def _get_regular_addon(self, url: str) -> TukuiAddon:
        session = await self._get_session()
        soup = await fetch_html(session, url)
        element = soup.select_one(_VERSION_SELECTOR)
        if element is None or not element.get_text(strip=True):
            raise RemoteCheckError(f"failed to query {url} page for a version")
        download_url = ensure_scheme(url).replace("?id=", "?download=", 1)
        return TukuiAddon(version=element.get_text(strip=True), url=download_url)

    async def get_latest_version(self, url: str) -> str:
        addon = await self._get_addon(url)
        if not addon.version:
            raise RemoteCheckError("the api response did not contain a version")
        return str(addon.version)

    async def download(self, url: str, dest_dir: str | Path) -> None:
        try:
            addon = await self._get_addon(url)
        except RemoteCheckError as e:
            raise InstallError(str(e)) from e
        if not addon.url:
            raise InstallError("the api response did not contain a download url")
        await self.install_zip(addon.url, dest_dir)
