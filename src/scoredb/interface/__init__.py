"""
Interface module - External interfaces to ScoreDB.

This module contains:
- cli.py: Command-line interface
"""

from scoredb.interface.cli import app as cli_app

__all__ = [
    "cli_app",
]
