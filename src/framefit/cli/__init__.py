"""CLI module for framefit.

Provides a command-line front end for analyzing a single image reference.
"""

from __future__ import annotations

from framefit.cli.main import app

__all__ = ["app"]
