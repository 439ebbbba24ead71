# site_snapshot/__init__.py
"""
SiteSnapshot package initializer.
Defines package version and exposes CLI.
"""
__version__ = "0.1.0"

# Expose CLI entry point
from .cli import cli  # noqa: E402
