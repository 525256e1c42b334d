"""CLI commands for cryptdown.

This package contains all subcommand implementations.
"""

from cryptdown.cli.commands import config, info, plan, restore, run

__all__ = ["config", "info", "plan", "restore", "run"]
