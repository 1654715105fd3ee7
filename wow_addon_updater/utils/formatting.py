"""
Helper functions for formatting data into human-readable strings.
"""


def format_duration(seconds: float) -> str:
    """
    Formats a duration in seconds into a human-readable string (e.g., '2m 12s').
    """
    s = int(seconds)
    minutes, secs = divmod(s, 60)
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def format_version(version: str) -> str:
    """Shows unknown versions explicitly instead of as an empty string."""
    return version or "(none)"
