"""
Command-line interface for the dockerpipe package.
"""

from .main import main, main_cli

__all__ = [
    "main",
    "main_cli",
]
