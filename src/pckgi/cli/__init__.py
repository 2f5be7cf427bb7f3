"""
Command-line interface for pckgi.

Provides Click-based CLI commands for searching, scanning and comparing
npm packages.
"""

from pckgi.cli.main import cli

__all__ = ["cli"]
