"""
CLI layer for userdb.

Provides a Typer application whose commands delegate to
``DatabaseManager`` and ``UserDao``.  This package handles only terminal
transport: argument parsing, coloured output, and table formatting.

Entry point::

    userdb --help
"""

from userdb.cli.app import app

__all__ = ["app"]
