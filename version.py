# -*- coding: utf-8 -*-
"""
XM Kit - Version Information

Central location for all version-related constants.
Update this file when releasing new versions.
"""

# =============================================================================
# VERSION INFORMATION
# =============================================================================

VERSION_MAJOR = 0
VERSION_MINOR = 3
VERSION_PATCH = 0

VERSION = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"

# =============================================================================
# APPLICATION INFO
# =============================================================================

APP_NAME = "XM Kit"
APP_DESCRIPTION = "Extended Module (XM 1.04) decoder and track state queries"

# XM format revision understood by the parser
XM_FORMAT_VERSION = "1.04"


def get_version_string() -> str:
    """Get formatted version string for display."""
    return f"{APP_NAME} {VERSION} (XM {XM_FORMAT_VERSION})"


__version__ = VERSION
__all__ = [
    'VERSION', 'VERSION_MAJOR', 'VERSION_MINOR', 'VERSION_PATCH',
    'APP_NAME', 'APP_DESCRIPTION', 'XM_FORMAT_VERSION', 'get_version_string',
]
