"""Command-line interface for cryptdown."""

from cryptdown.cli.main import app

__all__ = ["app"]
