"""Shared Rich display functions for teardown output.

Provides the console status reporter, the banner, the info panel and
result/audit/plan tables used by the CLI commands.
"""

import subprocess
from datetime import datetime

from rich.table import Table

from cryptdown.core.audit import AuditReport
from cryptdown.core.executor import PlannedStep
from cryptdown.core.reporting import StatusReporter
from cryptdown.core.sequencer import StepRecord
from cryptdown.core.sysinfo import SystemInfo
from cryptdown.models.step import StepStatus
from cryptdown.utils.formatting import (
    console,
    print_error,
    print_info,
    print_rule,
    print_success,
    print_warning,
)

_BANNER_RULE = "=" * 53

_STATUS_LABELS: dict[StepStatus, str] = {
    StepStatus.SUCCESS: "[success]OK[/success]",
    StepStatus.SKIPPED: "[muted]SKIP[/muted]",
    StepStatus.PARTIAL_FAILURE: "[warning]WARN[/warning]",
}


class ConsoleReporter(StatusReporter):
    """Prints the status stream to the terminal as it happens."""

    def __init__(self, quiet: bool = False) -> None:
        """Initialize the reporter.

        Args:
            quiet: Suppress progress lines; warnings and errors still print.
        """
        self._quiet = quiet

    def info(self, message: str) -> None:
        super().info(message)
        if not self._quiet:
            print_info(message)

    def ok(self, message: str) -> None:
        super().ok(message)
        if not self._quiet:
            print_success(message)

    def warn(self, message: str) -> None:
        super().warn(message)
        print_warning(message)

    def error(self, message: str) -> None:
        super().error(message)
        print_error(message)

    def wait(self, message: str, process: subprocess.Popen[bytes]) -> int | None:
        """Show a spinner until the background process exits."""
        with console.status(message, spinner="line"):
            return super().wait(message, process)


def print_banner(hostname: str) -> None:
    """Print the secure shutdown banner with host name and time."""
    now = datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S %Z")
    console.print(f"[banner]{_BANNER_RULE}[/]")
    console.print(f"[banner] Secure Shutdown — {hostname} — {now}[/]", highlight=False)
    console.print(f"[banner]{_BANNER_RULE}[/]")


def print_info_panel(info: SystemInfo, root_mapping: str) -> None:
    """Print host details relevant to encrypted teardown."""
    print_info(f"Kernel: {info.kernel}   Uptime: {info.uptime}")
    print_info(f"TTY: {info.tty}   User: {info.user}")
    print_info(f"Root source: {info.root_source}")

    if info.root_mapping_status is not None:
        print_info(f"LUKS mapping '{root_mapping}' is active:")
        for line in info.root_mapping_status:
            console.print(f"    {line}", highlight=False)
    else:
        print_warning(f"LUKS mapping '{root_mapping}' not detected")

    if info.block_devices:
        print_info("Block devices:")
        for line in info.block_devices:
            console.print(f"    {line}", highlight=False)

    print_info("Mounted under watched trees:")
    for entry in info.watched_mounts:
        console.print(
            f"    {entry.source} on {entry.target} type {entry.fstype}", highlight=False
        )
    print_rule()


def create_results_table(records: list[StepRecord] | tuple[StepRecord, ...]) -> Table:
    """Create a Rich table of step results.

    Args:
        records: Steps with their reported results.

    Returns:
        Rich Table with Status, Step and Detail columns.
    """
    table = Table(
        title="Teardown Results",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=6, justify="center")
    table.add_column("Step", no_wrap=True)
    table.add_column("Detail")

    for record in records:
        result = record.result
        table.add_row(
            _STATUS_LABELS[result.status],
            record.step.label,
            f"[muted]{result.detail or ''}[/muted]",
        )

    return table


def create_plan_table(plan: list[PlannedStep]) -> Table:
    """Create a Rich table of what each step would act on.

    Args:
        plan: Planned steps in execution order.

    Returns:
        Rich Table with Step, Targets and Protected columns.
    """
    table = Table(
        title="Teardown Plan",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("#", width=2, justify="right", style="muted")
    table.add_column("Step", no_wrap=True)
    table.add_column("Targets")
    table.add_column("Protected (kept)")

    for index, step in enumerate(plan, start=1):
        targets = "\n".join(step.targets) if step.targets else "-"
        kept = "\n".join(step.kept) if step.kept else ""
        table.add_row(
            str(index),
            step.name,
            f"[target]{targets}[/target]",
            f"[protected]{kept}[/protected]",
        )

    return table


def print_audit(report: AuditReport) -> None:
    """Print the final read-back so degraded teardown is visible."""
    console.print("\n[bold_header]Final state[/bold_header]")
    if report.protected_mappings:
        print_info(f"Protected mappings still open: {', '.join(report.protected_mappings)}")
    if report.residual_mappings:
        print_warning(f"Encrypted mappings still open: {', '.join(report.residual_mappings)}")
    else:
        print_success("No stray encrypted mappings.")
    if report.residual_mounts:
        print_warning(f"Mounts still present: {', '.join(report.residual_mounts)}")
    else:
        print_success("Watched trees are unmounted.")
    print_info(f"Network: {report.network_status}")
