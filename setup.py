"""
Setup script for ReserveProof.

This file exists for compatibility with older build tools and supplies the
version from the VERSION file. The primary build configuration is in
pyproject.toml.
"""

from pathlib import Path
from setuptools import setup

version_file = Path(__file__).parent / "VERSION"
version = version_file.read_text().strip()

setup(version=version)
