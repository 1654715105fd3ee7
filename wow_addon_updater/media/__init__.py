"""
Media Processing Layer.

This package is responsible for fetching addon archives and unpacking them
safely into an install directory.
"""

from .downloader import ZipDownloader
from .extractor import extract_zip

__all__ = ["ZipDownloader", "extract_zip"]
