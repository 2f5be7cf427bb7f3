"""
CLI entry point for running pckgi as a module.

Usage: python -m pckgi [OPTIONS] COMMAND [ARGS]...
"""

from pckgi.cli.main import cli

if __name__ == "__main__":
    cli()
