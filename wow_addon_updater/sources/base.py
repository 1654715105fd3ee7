"""
The contract every addon hosting site has to fulfil, plus a base class for
sources that talk HTTP and install zip archives.
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path

import aiohttp

from wow_addon_updater.media import ZipDownloader, extract_zip

log = logging.getLogger(__name__)


class UpdateSource(ABC):
    """
    An addon hosting site.

    Subclasses advertise the URLs they understand through ``URL_PATTERN`` and
    implement version lookup and installation for them.
    """

    name: str = "source"
    URL_PATTERN: re.Pattern

    def matches(self, url: str) -> bool:
        """Returns whether this source can handle the addon ``url``."""
        return bool(self.URL_PATTERN.search(url))

    @abstractmethod
    async def get_latest_version(self, url: str) -> str:
        """Returns the newest version string published for the addon."""

    @abstractmethod
    async def download(self, url: str, dest_dir: str | Path) -> None:
        """Downloads the newest release of the addon and installs it into ``dest_dir``."""

    @abstractmethod
    async def close(self) -> None:
        """Releases any resources held by the source."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class HTTPSource(UpdateSource):
    """
    Base for sources that fetch metadata over HTTP and install zip archives.

    The aiohttp session is created lazily and owned by the source unless one is
    injected, in which case the caller keeps ownership of it.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        downloader: ZipDownloader | None = None,
    ):
        self._session = session
        self._owns_session = session is None
        self.downloader = downloader or ZipDownloader()

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=None, sock_connect=15, sock_read=90)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": "wow-addon-updater"},
            )
            self._owns_session = True
        return self._session

    async def install_zip(self, archive_url: str, dest_dir: str | Path) -> list[Path]:
        """Downloads the archive at ``archive_url`` and extracts it into ``dest_dir``."""
        session = await self._get_session()
        archive_path = await self.downloader.download_zip(session, archive_url)
        return await asyncio.to_thread(extract_zip, archive_path, dest_dir)

    async def close(self) -> None:
        self.downloader.close()
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            log.debug(f"Closed HTTP session of the {self.name} source.")
