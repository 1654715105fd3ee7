"""
Core application engine for orchestrating the update process.

This package contains the primary logic. The `AddonUpdater` walks the addons
of every game profile, asks the matching update source for the latest
version, and installs it when the recorded version differs.
"""
