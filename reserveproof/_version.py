"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

Version information for ReserveProof.

A source checkout reads the VERSION file next to the package; an installed
wheel reads its distribution metadata.
"""

from importlib import metadata
from pathlib import Path

DISTRIBUTION_NAME = "reserveproof"

_VERSION_FILE = Path(__file__).resolve().parent.parent / "VERSION"


def get_version() -> str:
    """Return the ReserveProof version string, or "unknown" when it cannot be found."""
    if _VERSION_FILE.is_file():
        return _VERSION_FILE.read_text().strip()
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return "unknown"


__version__ = get_version()
