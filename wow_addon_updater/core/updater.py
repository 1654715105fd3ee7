"""
The orchestrator that checks every configured addon for a newer release,
installs it, and records the installed version.
"""

import asyncio
import logging
import os
from collections.abc import Iterable
from pathlib import Path

import aiohttp
from rich.markup import escape

from wow_addon_updater.exceptions import InstallError, LedgerError, RemoteCheckError
from wow_addon_updater.models.config import UpdaterConfig
from wow_addon_updater.models.stats import UpdateStats
from wow_addon_updater.sources import SourceRegistry, UpdateSource
from wow_addon_updater.storage.ledger import (
    DEFAULT_LEDGER_PATH,
    Profile,
    VersionLedger,
)

log = logging.getLogger(__name__)

# Retail first, then classic.
PROFILE_ORDER = (Profile.RETAIL, Profile.CLASSIC)

_TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)


class AddonUpdater:
    """
    Updates the addons of both game profiles, one addon at a time.

    The ledger is read once at construction. Sources are borrowed for the run;
    closing them is the responsibility of whoever created them.
    """

    def __init__(
        self,
        config: UpdaterConfig,
        sources: SourceRegistry | Iterable[UpdateSource],
        ledger_path: str | os.PathLike = DEFAULT_LEDGER_PATH,
    ):
        self.config = config
        self.registry = (
            sources if isinstance(sources, SourceRegistry) else SourceRegistry(sources)
        )
        self.ledger_path = Path(ledger_path)
        self.ledger = VersionLedger.load(self.ledger_path)
        self.stats = UpdateStats()

    async def update_addons(self) -> UpdateStats:
        """
        Updates all addons of the retail and then the classic profile.

        The first failing addon aborts the run. The ledger is saved in every
        case, so addons updated before the failure are not downloaded again.

        Raises:
            AddonUpdaterError: For the first addon that could not be updated,
            or a LedgerError if saving fails after an otherwise clean run.
        """
        completed = False
        try:
            for profile in PROFILE_ORDER:
                await self._update_profile(profile)
            completed = True
        finally:
            self._save_ledger(raise_errors=completed)
        return self.stats

    def _save_ledger(self, raise_errors: bool) -> None:
        try:
            self.ledger.save(self.ledger_path)
        except LedgerError as e:
            if raise_errors:
                raise
            log.error(f"[red]Failed to write versions file: {e}[/red]")

    async def _update_profile(self, profile: Profile) -> None:
        profile_config = self.config.profile(profile.value)
        if not profile_config.addons:
            log.debug(f"No {profile.value} addons configured.")
            return

        log.info(
            f"[bold]Checking {len(profile_config.addons)} {profile.value} "
            "addon(s)...[/bold]"
        )
        for url in profile_config.addons:
            await self.update_addon(profile, url, profile_config.path)

    async def update_addon(self, profile: Profile, url: str, install_dir: str) -> bool:
        """
        Brings a single addon up to date.

        Returns:
            True if the addon was installed, False if it was already current.
        """
        source = self.registry.resolve(url)
        log.info(f"Updating addon: [cyan]{escape(url)}[/cyan]")

        try:
            latest = await source.get_latest_version(url)
        except _TRANSPORT_ERRORS as e:
            raise RemoteCheckError(
                f"Failed to check the latest version of {url}: {e}"
            ) from e
        self.stats.addons_checked += 1

        current = self.ledger.get(profile, url)
        # An empty version means the source could not tell, so always reinstall.
        if latest and latest == current:
            log.info("[dim]No need for an update.[/dim]")
            self.stats.addons_up_to_date += 1
            return False

        try:
            await source.download(url, install_dir)
        except _TRANSPORT_ERRORS as e:
            raise InstallError(f"Failed to install {url}: {e}") from e

        self.ledger.set(profile, url, latest)
        self.stats.record_update(profile.value, url, current, latest)
        log.info(f"[green]✓ Updated to version: {escape(latest)}[/green]")
        return True
