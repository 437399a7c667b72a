"""
Version information for the cloudscore package.

This module provides semantic versioning information following PEP 440.
The version string is embedded in the User-Agent; the wire protocol
version is sent separately in the ``x-sdkversion`` header.
"""

from __future__ import annotations

# Version components
VERSION_MAJOR = 1
VERSION_MINOR = 0
VERSION_PATCH = 0
VERSION_SUFFIX = ""  # e.g., "a1", "b2", "rc1", or "" for final

# Construct version string
__version__ = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"
if VERSION_SUFFIX:
    __version__ += VERSION_SUFFIX

# Wire protocol version expected by the backend
SDK_PROTOCOL_VERSION = "1"


__all__ = [
    "__version__",
    "VERSION_MAJOR",
    "VERSION_MINOR",
    "VERSION_PATCH",
    "VERSION_SUFFIX",
    "SDK_PROTOCOL_VERSION",
]
