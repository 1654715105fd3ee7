"""
Persists the last installed version of every addon, per game profile, so that
repeated runs only download what actually changed.
"""

import logging
import os
from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from wow_addon_updater.exceptions import LedgerError
from wow_addon_updater.utils.hidden import write_hidden

log = logging.getLogger(__name__)

DEFAULT_LEDGER_PATH = Path(".versions")


class Profile(str, Enum):
    """The independently managed game clients."""

    CLASSIC = "classic"
    RETAIL = "retail"


class AddonRecord(BaseModel):
    """One installed addon as stored in the versions file."""

    name: str
    version: str = ""

    @field_validator("name", "version", mode="before")
    @classmethod
    def coerce_scalar(cls, v):
        """YAML turns unquoted values like ``1.10`` into numbers."""
        if v is None:
            return ""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class LedgerDocument(BaseModel):
    """The on-disk layout of the versions file."""

    classic: list[AddonRecord] = Field(default_factory=list)
    retail: list[AddonRecord] = Field(default_factory=list)

    @field_validator("classic", "retail", mode="before")
    @classmethod
    def empty_collection(cls, v):
        return [] if v is None else v


class VersionLedger:
    """
    In-memory map of addon URL to installed version for each profile.

    The map is the single source of truth while the updater runs; ``save``
    overwrites the file wholesale.
    """

    def __init__(self, versions: dict[Profile, dict[str, str]] | None = None):
        self._versions: dict[Profile, dict[str, str]] = {
            profile: dict((versions or {}).get(profile, {})) for profile in Profile
        }

    @classmethod
    def load(cls, path: str | os.PathLike) -> "VersionLedger":
        """
        Loads the ledger from ``path``.

        A missing file is a first run and yields an empty ledger.

        Raises:
            LedgerError: If the file exists but cannot be read or parsed.
        """
        ledger_path = Path(path)
        if not ledger_path.is_file():
            log.debug(f"No versions file at '{ledger_path}', starting empty.")
            return cls()

        try:
            content = ledger_path.read_text(encoding="utf-8")
        except OSError as e:
            raise LedgerError(
                f"Failed to read versions file '{ledger_path}': {e}"
            ) from e

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise LedgerError(
                f"Versions file '{ledger_path}' is not valid YAML: {e}"
            ) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise LedgerError(
                f"Versions file '{ledger_path}' does not contain a mapping of "
                "profiles."
            )

        try:
            document = LedgerDocument.model_validate(data)
        except ValidationError as e:
            raise LedgerError(
                f"Versions file '{ledger_path}' is malformed:\n{e}"
            ) from e

        ledger = cls(
            {
                Profile.CLASSIC: {r.name: r.version for r in document.classic},
                Profile.RETAIL: {r.name: r.version for r in document.retail},
            }
        )
        log.debug(
            f"Loaded {len(document.classic)} classic and {len(document.retail)} "
            f"retail addon versions from '{ledger_path}'."
        )
        return ledger

    def get(self, profile: Profile, url: str) -> str:
        """Returns the installed version of an addon, or ``""`` if unknown."""
        return self._versions[Profile(profile)].get(url, "")

    def __contains__(self, key: tuple[Profile, str]) -> bool:
        profile, url = key
        return url in self._versions[Profile(profile)]

    def set(self, profile: Profile, url: str, version: str) -> None:
        """Records ``version`` as the installed version of an addon."""
        self._versions[Profile(profile)][url] = version

    def records(self, profile: Profile) -> list[AddonRecord]:
        """Returns the records of one profile in insertion order."""
        return [
            AddonRecord(name=url, version=version)
            for url, version in self._versions[Profile(profile)].items()
        ]

    def to_document(self) -> LedgerDocument:
        return LedgerDocument(
            classic=self.records(Profile.CLASSIC),
            retail=self.records(Profile.RETAIL),
        )

    def save(self, path: str | os.PathLike) -> Path:
        """
        Writes the ledger to ``path`` as a hidden file.

        Raises:
            LedgerError: If the path is not a valid hidden file or cannot be
            written.
        """
        payload = yaml.safe_dump(
            self.to_document().model_dump(), sort_keys=False, allow_unicode=True
        )
        written = write_hidden(path, payload.encode("utf-8"))
        log.debug(f"Saved addon versions to '{written}'.")
        return written
