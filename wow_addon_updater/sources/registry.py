"""
Routes addon URLs to the update source that serves them.
"""

import logging
from collections.abc import Iterable, Iterator

from wow_addon_updater.exceptions import SourceNotSupportedError

from .base import UpdateSource

log = logging.getLogger(__name__)


class SourceRegistry:
    """
    An ordered, read-only collection of update sources.

    Resolution returns the first source whose pattern matches, so the
    registration order decides between sources with overlapping patterns.
    """

    def __init__(self, sources: Iterable[UpdateSource]):
        self._sources: tuple[UpdateSource, ...] = tuple(sources)

    def __iter__(self) -> Iterator[UpdateSource]:
        return iter(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    def resolve(self, url: str) -> UpdateSource:
        """
        Returns the first registered source that can handle ``url``.

        Raises:
            SourceNotSupportedError: If no source matches.
        """
        for source in self._sources:
            if source.matches(url):
                log.debug(f"Resolved '{url}' to the {source.name} source.")
                return source
        raise SourceNotSupportedError(url)
