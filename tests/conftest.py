"""
Shared fixtures: zip archive builders, an in-memory update source, and local
HTTP servers standing in for the addon hosting sites.
"""

import io
import re
import zipfile
from pathlib import Path

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from wow_addon_updater.exceptions import InstallError
from wow_addon_updater.sources import UpdateSource


def build_zip(entries: dict[str, str | bytes | None]) -> bytes:
    """
    Builds a zip archive in memory. A ``None`` value creates a directory entry,
    everything else a file with that content.
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in entries.items():
            if content is None:
                dir_name = name if name.endswith("/") else f"{name}/"
                archive.writestr(zipfile.ZipInfo(dir_name), "")
            else:
                archive.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def make_zip(tmp_path):
    """Writes a zip archive built by ``build_zip`` to a temporary file."""

    def _make_zip(entries: dict, name: str = "addon.zip") -> Path:
        path = tmp_path / name
        path.write_bytes(build_zip(entries))
        return path

    return _make_zip


class FakeSource(UpdateSource):
    """An update source that serves versions from a dict and records downloads."""

    def __init__(
        self,
        pattern: str,
        versions: dict[str, str] | None = None,
        name: str = "fake",
        failing_checks: set[str] | None = None,
        failing_downloads: set[str] | None = None,
    ):
        self.name = name
        self.URL_PATTERN = re.compile(pattern)
        self.versions = dict(versions or {})
        self.failing_checks = failing_checks or set()
        self.failing_downloads = failing_downloads or set()
        self.downloads: list[tuple[str, str]] = []
        self.closed = False

    async def get_latest_version(self, url: str) -> str:
        if url in self.failing_checks:
            raise aiohttp.ClientConnectionError(f"cannot reach {url}")
        return self.versions[url]

    async def download(self, url: str, dest_dir) -> None:
        if url in self.failing_downloads:
            raise InstallError(f"download of {url} failed")
        self.downloads.append((url, str(dest_dir)))
        target = Path(dest_dir)
        target.mkdir(parents=True, exist_ok=True)
        (target / f"{len(self.downloads)}.toc").write_text(self.versions[url])

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_source():
    return FakeSource


@pytest.fixture
async def serve():
    """Starts local HTTP servers from a mapping of path to aiohttp handler."""
    servers: list[TestServer] = []

    async def _serve(routes: dict) -> str:
        app = web.Application()
        for path, handler in routes.items():
            app.router.add_get(path, handler)
        server = TestServer(app)
        await server.start_server()
        servers.append(server)
        return f"http://{server.host}:{server.port}"

    yield _serve

    for server in servers:
        await server.close()


def zip_response(entries: dict[str, str | bytes | None]):
    """Returns an aiohttp handler serving a zip built from ``entries``."""
    payload = build_zip(entries)

    async def handler(request: web.Request) -> web.Response:
        return web.Response(body=payload, content_type="application/zip")

    return handler


def html_response(html: str):
    async def handler(request: web.Request) -> web.Response:
        return web.Response(text=html, content_type="text/html")

    return handler


@pytest.fixture
def zip_handler():
    return zip_response


@pytest.fixture
def html_handler():
    return html_response
