"""
Update Sources Layer.

This package contains one update source per addon hosting site and the
registry that routes an addon URL to the source serving it.
"""

import logging
from collections.abc import Iterable

from .base import HTTPSource, UpdateSource
from .github import GitHubSource
from .registry import SourceRegistry
from .tukui import TukuiSource
from .wowinterface import WowInterfaceSource

log = logging.getLogger(__name__)


def default_sources() -> list[UpdateSource]:
    """Builds the supported sources in resolution order."""
    return [TukuiSource(), WowInterfaceSource(), GitHubSource()]


async def close_sources(sources: Iterable[UpdateSource]) -> None:
    """Closes every source, even if closing one of them fails."""
    for source in sources:
        try:
            await source.close()
        except Exception as e:
            log.warning(f"[yellow]Failed to close the {source.name} source: {e}[/yellow]")


__all__ = [
    "GitHubSource",
    "HTTPSource",
    "SourceRegistry",
    "TukuiSource",
    "UpdateSource",
    "WowInterfaceSource",
    "close_sources",
    "default_sources",
]
