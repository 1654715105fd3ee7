"""
Safe extraction of addon zip archives into an install directory.
"""

import logging
import os
import shutil
import zipfile
from pathlib import Path

from wow_addon_updater.exceptions import ArchiveError, PathTraversalError

log = logging.getLogger(__name__)

_DEFAULT_FILE_MODE = 0o666
_WRITE_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_TRUNC | getattr(os, "O_BINARY", 0)


def _resolve_entry(root: str, entry_name: str) -> str:
    """
    Joins an archive entry name onto the extraction root and ensures the
    result stays inside it.
    """
    target = os.path.normpath(os.path.join(root, entry_name))
    try:
        inside = os.path.commonpath([root, target]) == root
    except ValueError:
        # Different drives on Windows.
        inside = False
    if not inside:
        raise PathTraversalError(
            f"illegal file path in archive: '{entry_name}' escapes '{root}'"
        )
    return target


def _entry_mode(info: zipfile.ZipInfo) -> int:
    """Returns the permission bits recorded for an entry, if any."""
    mode = (info.external_attr >> 16) & 0o777
    return mode or _DEFAULT_FILE_MODE


def extract_zip(
    archive_path: str | os.PathLike, dest_dir: str | os.PathLike
) -> list[Path]:
    """
    Extracts a zip archive into ``dest_dir``.

    Every entry path is validated before anything is written, so an archive
    containing a single zip-slip entry leaves the filesystem untouched.
    Files from an earlier, successfully extracted archive are not rolled back.

    Args:
        archive_path: Path of the zip file to extract.
        dest_dir: Directory the archive content is written into.

    Returns:
        The directories and files written, in archive order.

    Raises:
        PathTraversalError: If an entry would be written outside ``dest_dir``.
        ArchiveError: If the archive is missing, corrupt, or cannot be written.
    """
    root = os.path.abspath(os.fspath(dest_dir))

    try:
        with zipfile.ZipFile(archive_path) as archive:
            entries = archive.infolist()
            targets = [_resolve_entry(root, info.filename) for info in entries]

            written: list[Path] = []
            for info, target in zip(entries, targets):
                if info.is_dir():
                    os.makedirs(target, exist_ok=True)
                else:
                    os.makedirs(os.path.dirname(target), exist_ok=True)
                    fd = os.open(target, _WRITE_FLAGS, _entry_mode(info))
                    with os.fdopen(fd, "wb") as out, archive.open(info) as src:
                        shutil.copyfileobj(src, out)
                written.append(Path(target))
    except PathTraversalError:
        raise
    except zipfile.BadZipFile as e:
        raise ArchiveError(f"'{archive_path}' is not a valid zip archive: {e}") from e
    except (OSError, zipfile.LargeZipFile) as e:
        raise ArchiveError(f"failed to extract '{archive_path}': {e}") from e

    log.debug(f"Extracted {len(written)} entries from '{archive_path}' to '{root}'.")
    return written
