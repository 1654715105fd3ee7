"""
Dataclass for tracking the statistics of one update run.
"""

from dataclasses import dataclass, field


@dataclass
class AddonUpdate:
    """An addon that was (re)installed during the run."""

    profile: str
    url: str
    old_version: str
    new_version: str


@dataclass
class UpdateStats:
    """Tracks what happened to the addons of an update run."""

    addons_checked: int = 0
    addons_up_to_date: int = 0
    updates: list[AddonUpdate] = field(default_factory=list)

    @property
    def addons_updated(self) -> int:
        return len(self.updates)

    def record_update(
        self, profile: str, url: str, old_version: str, new_version: str
    ) -> None:
        self.updates.append(AddonUpdate(profile, url, old_version, new_version))
