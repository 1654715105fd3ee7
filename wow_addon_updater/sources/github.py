"""
Update source for addons released on GitHub.
"""

import asyncio
import logging
import os
import re
import shutil
from pathlib import Path
from typing import Any

import aiohttp
from pathvalidate import sanitize_filename

from wow_addon_updater.exceptions import InstallError, RemoteCheckError
from wow_addon_updater.media import ZipDownloader
from wow_addon_updater.utils.http import fetch_json

from .base import HTTPSource

log = logging.getLogger(__name__)

_REPO_REGEX = re.compile(
    r"github\.com/(?P<owner>[a-zA-Z0-9-]+)/(?P<repo>[a-zA-Z0-9_.-]+?)/?$"
)
_ZIP_CONTENT_TYPES = {"application/zip", "application/x-zip-compressed"}


class GitHubSource(HTTPSource):
    """
    Installs the latest GitHub release of a repository.

    A release with a single zip asset is installed from that asset; otherwise
    the source archive of the release is installed under the repository name.
    """

    name = "GitHub"
    URL_PATTERN = re.compile(
        r"^(https?://)?github\.com/[a-zA-Z0-9-]+/[a-zA-Z0-9_.-]+/?$"
    )
    API_URL = "https://api.github.com"

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        downloader: ZipDownloader | None = None,
        api_url: str | None = None,
        token: str | None = None,
    ):
        super().__init__(session, downloader)
        self.api_url = (api_url or self.API_URL).rstrip("/")
        self.token = token if token is not None else os.getenv("GITHUB_TOKEN", "")
        self._releases: dict[str, dict[str, Any]] = {}

    @staticmethod
    def parse_repository(url: str) -> tuple[str, str]:
        """Extracts the owner and repository name from a GitHub URL."""
        match = _REPO_REGEX.search(url)
        if not match:
            raise RemoteCheckError(
                f"the given url {url} is invalid for a github repository"
            )
        return match.group("owner"), match.group("repo")

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _fetch_latest_release(self, url: str) -> dict[str, Any]:
        owner, repo = self.parse_repository(url)
        session = await self._get_session()
        try:
            release = await fetch_json(
                session,
                f"{self.api_url}/repos/{owner}/{repo}/releases/latest",
                headers=self._headers(),
            )
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise RemoteCheckError(
                f"Failed to query the latest release of {owner}/{repo}: {e}"
            ) from e
        if not isinstance(release, dict):
            raise RemoteCheckError(
                f"Unexpected release response for {owner}/{repo}."
            )
        return release

    async def get_latest_version(self, url: str) -> str:
        release = await self._fetch_latest_release(url)
        self._releases[url] = release
        tag = release.get("tag_name")
        if not tag:
            raise RemoteCheckError(f"The latest release of {url} has no tag.")
        return str(tag)

    async def download(self, url: str, dest_dir: str | Path) -> None:
        # The release seen by the last version check is installed once.
        release = self._releases.pop(url, None)
        if release is None:
            release = await self._fetch_latest_release(url)

        assets = release.get("assets") or []
        if len(assets) == 1 and assets[0].get("content_type") in _ZIP_CONTENT_TYPES:
            archive_url = assets[0].get("browser_download_url")
            if not archive_url:
                raise InstallError(f"The release asset of {url} has no download URL.")
            log.debug(f"Installing release asset '{assets[0].get('name')}'.")
            await self.install_zip(archive_url, dest_dir)
            return

        archive_url = release.get("zipball_url")
        if not archive_url:
            raise InstallError(f"The latest release of {url} has no source archive.")
        written = await self.install_zip(archive_url, dest_dir)
        _, repo = self.parse_repository(url)
        await asyncio.to_thread(self._rename_root, written, Path(dest_dir), repo)

    @staticmethod
    def _rename_root(written: list[Path], dest_dir: Path, repo: str) -> Path:
        """
        Source archives contain a single ``<owner>-<repo>-<sha>`` directory,
        which is renamed to the repository name.
        """
        root = os.path.abspath(dest_dir)
        top_level = {
            Path(os.path.relpath(p, root)).parts[0]
            for p in written
            if os.path.abspath(p) != root
        }
        if len(top_level) != 1:
            raise InstallError(
                "the git archive does not have a single root directory"
            )

        extracted = Path(root) / top_level.pop()
        if not extracted.is_dir():
            raise InstallError(
                "the git archive does not have a single root directory"
            )

        target = Path(root) / sanitize_filename(repo)
        if extracted == target:
            return target
        try:
            if target.is_dir():
                shutil.rmtree(target)
            elif target.exists():
                target.unlink()
            extracted.rename(target)
        except OSError as e:
            raise InstallError(f"Failed to move '{extracted}' to '{target}': {e}") from e
        log.debug(f"Renamed '{extracted.name}' to '{target.name}'.")
        return target

    async def close(self) -> None:
        self._releases.clear()
        await super().close()
