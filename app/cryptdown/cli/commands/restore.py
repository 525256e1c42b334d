"""Restore command implementation.

Re-enables networking left down by an interrupted teardown.
"""

import typer

from cryptdown.cli.display import ConsoleReporter
from cryptdown.core.compensator import Compensator
from cryptdown.core.marker import CompensationMarker
from cryptdown.network import select_backend
from cryptdown.utils.formatting import print_error, print_info

app = typer.Typer(
    help="Restore networking after an interrupted teardown.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def restore(ctx: typer.Context) -> None:
    """Restore networking if a teardown left it down.

    Does nothing when no compensation marker is present.
    """
    if ctx.invoked_subcommand is not None:
        return

    marker = CompensationMarker()
    if not marker.exists():
        print_info("No interrupted teardown found; nothing to restore.")
        return

    Compensator(marker, select_backend(), ConsoleReporter()).restore_if_needed()

    if marker.exists():
        print_error(f"Networking not fully restored; marker kept at {marker.path}")
        raise typer.Exit(code=1)
