"""Plan command implementation.

Shows what each teardown step would act on, after protected resources
are filtered out, without changing anything.
"""

from pathlib import Path
from typing import Annotated

import typer

from cryptdown.cli.display import create_plan_table
from cryptdown.core.config import require_config
from cryptdown.core.executor import plan_steps
from cryptdown.core.snapshot import collect_context, collect_protected
from cryptdown.utils.formatting import console, print_info

app = typer.Typer(
    help="Show what a teardown would act on.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def plan(
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
    """Show the teardown plan for the current system state."""
    if ctx.invoked_subcommand is not None:
        return

    config = require_config(config_path)
    protected = collect_protected(config)
    context = collect_context(config)

    console.print(create_plan_table(plan_steps(context, protected)))
    print_info(
        f"Root mapping '{protected.root_luks_name}' and mounts "
        f"{', '.join(protected.protected_mounts)} are never touched."
    )
