"""
CBI Stage - Main entry point

This module delegates to cli.py.
"""

from .cli import cli

if __name__ == "__main__":
    cli()
