"""Toolchain acquisition for SmartBlock.

This package detects the host platform, downloads and extracts the
arduino-cli distribution, and locates the executable.
"""

from .archive_utils import (
    ArchiveExtractor,
    ExtractionError,
    TarGzExtractor,
    ZipExtractor,
    extractor_for,
    find_binary,
)
from .cache import Cache
from .downloader import (
    CyclicRedirectError,
    InsecureUrlError,
    HttpError,
    NetworkError,
    PackageDownloader,
    TooManyRedirectsError,
)
from .platform_utils import (
    PlatformProfile,
    PlatformResolver,
    PlatformTarget,
    UnsupportedPlatformError,
)
from .toolchain import (
    Toolchain,
    ToolchainError,
    ToolchainNotFoundError,
    ToolchainNotFoundInArchiveError,
)

__all__ = [
    "ArchiveExtractor",
    "TarGzExtractor",
    "ZipExtractor",
    "extractor_for",
    "find_binary",
    "ExtractionError",
    "Cache",
    "PackageDownloader",
    "NetworkError",
    "HttpError",
    "TooManyRedirectsError",
    "CyclicRedirectError",
    "InsecureUrlError",
    "PlatformProfile",
    "PlatformResolver",
    "PlatformTarget",
    "UnsupportedPlatformError",
    "Toolchain",
    "ToolchainError",
    "ToolchainNotFoundError",
    "ToolchainNotFoundInArchiveError",
]
