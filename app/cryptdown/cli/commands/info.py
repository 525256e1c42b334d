"""Info command implementation."""

from pathlib import Path
from typing import Annotated

import typer

from cryptdown.cli.display import print_banner, print_info_panel
from cryptdown.core.config import require_config
from cryptdown.core.sysinfo import gather_system_info

app = typer.Typer(
    help="Show host details relevant to teardown.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def info(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file.",
        ),
    ] = None,
) -> None:
    """Show kernel, root volume, block devices and watched mounts."""
    if ctx.invoked_subcommand is not None:
        return

    config = require_config(config_path)
    system = gather_system_info(config)
    print_banner(system.hostname)
    print_info_panel(system, config.root_mapping)
