"""Command-line interface for colmgr."""

from .main import cli, main

__all__ = ["cli", "main"]
