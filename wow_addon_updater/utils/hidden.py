"""
Platform-specific helpers for writing files that stay out of directory listings.

POSIX systems hide files by naming convention (a leading dot), Windows hides
them with a file attribute. The implementation is selected once at import time
so callers only ever see ``is_hidden_path`` and ``write_hidden``.
"""

import os
from pathlib import Path

from wow_addon_updater.exceptions import HiddenFileError

_FILE_ATTRIBUTE_HIDDEN = 0x2
_INVALID_FILE_ATTRIBUTES = 0xFFFFFFFF


def _posix_is_hidden_path(path: str | os.PathLike) -> bool:
    """Returns whether the file name of ``path`` follows the dotfile convention."""
    name = os.path.basename(os.fspath(path))
    return len(name) > 1 and name.startswith(".") and name != ".."


def _posix_write_hidden(path: str | os.PathLike, data: bytes) -> Path:
    target = Path(path)
    if not _posix_is_hidden_path(target):
        raise HiddenFileError(f"the path {target} is not valid for a hidden file")
    try:
        target.write_bytes(data)
    except OSError as e:
        raise HiddenFileError(f"failed to write hidden file {target}: {e}") from e
    return target


def _windows_is_hidden_path(path: str | os.PathLike) -> bool:
    """Any named file can carry the hidden attribute on Windows."""
    name = os.path.basename(os.fspath(path))
    return name not in ("", ".", "..")


def _windows_write_hidden(path: str | os.PathLike, data: bytes) -> Path:
    import ctypes

    target = Path(path)
    if not _windows_is_hidden_path(target):
        raise HiddenFileError(f"the path {target} is not valid for a hidden file")

    kernel32 = ctypes.windll.kernel32
    try:
        # Opening a hidden file with CREATE_ALWAYS ("w") is refused by Windows,
        # so existing files are truncated in place instead.
        if target.is_file():
            with open(target, "r+b") as f:
                f.truncate(0)
                f.write(data)
        else:
            target.write_bytes(data)
    except OSError as e:
        raise HiddenFileError(f"failed to write hidden file {target}: {e}") from e

    attributes = kernel32.GetFileAttributesW(str(target))
    if attributes == _INVALID_FILE_ATTRIBUTES:
        raise HiddenFileError(f"could not read the attributes of {target}")
    if not kernel32.SetFileAttributesW(
        str(target), attributes | _FILE_ATTRIBUTE_HIDDEN
    ):
        raise HiddenFileError(f"could not hide the file {target}")
    return target


if os.name == "nt":
    is_hidden_path = _windows_is_hidden_path
    write_hidden = _windows_write_hidden
else:
    is_hidden_path = _posix_is_hidden_path
    write_hidden = _posix_write_hidden
