"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class AddonUpdaterError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(AddonUpdaterError):
    """Raised for issues related to configuration loading or validation."""


class SourceNotSupportedError(AddonUpdaterError):
    """Raised when no registered update source can handle an addon URL."""

    def __init__(self, url: str):
        super().__init__(f"addon url: {url} is not supported")
        self.url = url


class RemoteCheckError(AddonUpdaterError):
    """Raised when the latest version of an addon cannot be determined."""


class InstallError(AddonUpdaterError):
    """Raised when an addon could not be downloaded or installed."""


class ArchiveError(InstallError):
    """Raised when a zip archive is missing, corrupt, or cannot be extracted."""


class PathTraversalError(ArchiveError):
    """
    Raised when an archive entry would be written outside of the extraction
    directory.
    """


class LedgerError(AddonUpdaterError):
    """Raised when the installed-versions file cannot be read or written."""


class HiddenFileError(LedgerError):
    """Raised when a path cannot be written as a hidden file."""
