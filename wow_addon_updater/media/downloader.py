"""
Downloads addon archives over HTTP into a private scratch directory.
"""

import asyncio
import logging
import os
import shutil
import tempfile
from pathlib import Path

import aiofiles
import aiohttp

from wow_addon_updater.exceptions import InstallError

log = logging.getLogger(__name__)


class ZipDownloader:
    """
    Streams zip archives to disk with retry logic.

    Each instance owns a temporary directory that lives until ``close()`` is
    called; every download gets its own uniquely named file inside it.
    """

    CHUNK_SIZE = 131072  # 128 KB

    def __init__(self, max_attempts: int = 3, base_delay: float = 1.5):
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.temp_dir = Path(tempfile.mkdtemp(prefix="wow-updater-"))

    def _new_archive_path(self) -> Path:
        fd, name = tempfile.mkstemp(suffix=".zip", dir=self.temp_dir)
        os.close(fd)
        return Path(name)

    async def download_zip(self, session: aiohttp.ClientSession, url: str) -> Path:
        """
        Downloads ``url`` into a new ``.zip`` file in the scratch directory.

        Raises:
            InstallError: If the download still fails after all attempts.
        """
        if self.temp_dir is None:
            raise InstallError("the downloader has already been closed")

        destination = self._new_archive_path()
        last_exception: Exception | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                async with session.get(url, allow_redirects=True) as response:
                    response.raise_for_status()
                    async with aiofiles.open(destination, "wb") as f:
                        async for chunk in response.content.iter_chunked(
                            self.CHUNK_SIZE
                        ):
                            await f.write(chunk)
                log.debug(f"Downloaded '{url}' to '{destination.name}'.")
                return destination
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_exception = e
                log.debug(
                    f"Download attempt {attempt}/{self.max_attempts} for "
                    f"'{url}' failed: {e}. Retrying..."
                )
                if attempt < self.max_attempts:
                    await asyncio.sleep(self.base_delay * (2 ** (attempt - 1)))

        raise InstallError(
            f"failed to download '{url}' after {self.max_attempts} attempts: "
            f"{last_exception}"
        ) from last_exception

    def close(self) -> None:
        """Removes the scratch directory and everything downloaded into it."""
        if self.temp_dir is None:
            return
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir)
        log.debug(f"Removed download directory '{self.temp_dir}'.")
        self.temp_dir = None
