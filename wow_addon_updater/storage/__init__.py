"""
Storage Layer.

This package handles all data persistence: the configuration file and the
ledger of installed addon versions.
"""

from .config_manager import ConfigManager
from .ledger import Profile, VersionLedger

__all__ = ["ConfigManager", "Profile", "VersionLedger"]
