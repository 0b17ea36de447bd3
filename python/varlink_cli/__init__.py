"""
varlink-cli command-line client.

Calls methods of varlink services and shows their interface descriptions.
Use ``varlink-cli`` or ``python -m varlink_cli`` to run it.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .cli import main  # noqa: E402

__all__ = ["main"]
