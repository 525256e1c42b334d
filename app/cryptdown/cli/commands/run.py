"""Run command implementation.

Shows the info panel, waits for confirmation, runs the teardown
sequence and powers the machine off.
"""

import os
import sys
from pathlib import Path
from typing import Annotated

import typer

from cryptdown.cli.display import (
    ConsoleReporter,
    create_results_table,
    print_audit,
    print_banner,
    print_info_panel,
)
from cryptdown.core.config import require_config
from cryptdown.core.executor import run_teardown
from cryptdown.core.marker import CompensationMarker
from cryptdown.core.sequencer import EXIT_FAULT, EXIT_INTERRUPTED
from cryptdown.core.sysinfo import gather_system_info
from cryptdown.utils.formatting import (
    console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from cryptdown.utils.shell import command_exists, run_interactive

app = typer.Typer(
    help="Tear down and power off.",
    invoke_without_command=True,
)


def _is_root() -> bool:
    return os.geteuid() == 0


def _reexec_with_sudo() -> None:
    """Replace this process with the same command line under ``sudo -E``.

    Returns only when sudo is missing or cannot be executed.
    """
    if not command_exists("sudo"):
        return
    print_info("Root privileges required; re-running with sudo…")
    try:
        os.execvp("sudo", ["sudo", "-E", *sys.argv])
    except OSError as e:
        print_error(f"Failed to run sudo: {e}")


@app.callback(invoke_without_command=True)
def run(
    ctx: typer.Context,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Do not wait for ENTER before tearing down.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Report what would be done without changing anything.",
        ),
    ] = False,
    no_poweroff: Annotated[
        bool,
        typer.Option(
            "--no-poweroff",
            help="Stop after teardown instead of powering off.",
        ),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file.",
        ),
    ] = None,
) -> None:
    """Tear the host down safely and power it off.

    Exit status is 0 after a completed teardown, 1 after an unexpected
    fault and 130 when interrupted. Networking is restored whenever the
    teardown does not complete.

    Examples:
        cryptdown run               # Info panel, ENTER, teardown, poweroff
        cryptdown run --dry-run     # Show what would happen
        cryptdown run -y --no-poweroff
    """
    if ctx.invoked_subcommand is not None:
        return

    quiet = bool(ctx.obj and ctx.obj.get("quiet"))

    if not dry_run and not _is_root():
        _reexec_with_sudo()
        print_error("Teardown requires root privileges. Re-run with sudo.")
        raise typer.Exit(code=EXIT_FAULT)

    config = require_config(config_path)
    marker = CompensationMarker()
    if marker.exists():
        print_warning(
            f"Found compensation marker {marker.path} from an earlier run; "
            "networking may still be down. See 'cryptdown restore'."
        )

    info = gather_system_info(config)
    print_banner(info.hostname)
    print_info_panel(info, config.root_mapping)

    if not yes:
        try:
            console.input(
                "\n[info]\\[→][/] Goodbye! [accent]Press ENTER to power off…[/accent]\n"
            )
        except (KeyboardInterrupt, EOFError):
            print_warning("Interrupted by user.")
            raise typer.Exit(code=EXIT_INTERRUPTED) from None

    print_banner(info.hostname)
    print_info("Starting secure shutdown…" if not dry_run else "Starting dry run…")

    try:
        outcome = run_teardown(
            config, marker=marker, reporter=ConsoleReporter(quiet=quiet), dry_run=dry_run
        )
    except KeyboardInterrupt:
        # Interrupted while collecting the snapshot, before any step ran
        print_warning("Interrupted by user.")
        raise typer.Exit(code=EXIT_INTERRUPTED) from None

    console.print(create_results_table(outcome.records))

    if not outcome.completed:
        print_error(f"Teardown aborted during {outcome.failed_step}: {outcome.error}")
        if outcome.obligations and not outcome.compensated and marker.exists():
            print_warning("Networking could not be restored. Run 'cryptdown restore'.")
        raise typer.Exit(code=outcome.exit_code)

    if outcome.audit is not None:
        print_audit(outcome.audit)
        if outcome.audit.clean:
            print_success("Teardown complete. Extra mounts are clean; stray LUKS closed.")
        else:
            print_warning("Teardown complete with leftovers; review the final state above.")

    if dry_run or no_poweroff:
        print_info("Skipping poweroff.")
        return

    print_info("Powering off now…")
    try:
        code = run_interactive(list(config.poweroff_command))
    except OSError as e:
        print_error(f"Poweroff failed: {e}")
        raise typer.Exit(code=EXIT_FAULT) from e
    if code != 0:
        print_error(f"Poweroff command exited with status {code}")
        raise typer.Exit(code=EXIT_FAULT)
