"""
Data Models Layer.

This package contains the Pydantic models and dataclasses that define the
core data structures used throughout the application, such as configuration
and run statistics.
"""

from .config import ProfileConfig, UpdaterConfig
from .stats import AddonUpdate, UpdateStats

__all__ = ["AddonUpdate", "ProfileConfig", "UpdateStats", "UpdaterConfig"]
