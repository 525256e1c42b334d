"""Unit tests for cli/display.py."""

import io

from cryptdown.cli.display import create_plan_table, create_results_table, print_audit
from cryptdown.core.audit import AuditReport
from cryptdown.core.executor import PlannedStep
from cryptdown.core.sequencer import StepRecord
from cryptdown.core.theme import get_theme
from cryptdown.models.step import StepResult, TeardownStep
from rich.console import Console


def _render(renderable: object) -> str:
    buf = io.StringIO()
    Console(theme=get_theme(), file=buf, color_system=None, width=120).print(renderable)
    return buf.getvalue()


def _capture_console_output(func: object, *args: object) -> str:
    """Capture output of display helpers by swapping the shared console."""
    import cryptdown.cli.display as display_mod
    import cryptdown.utils.formatting as fmt_mod

    buf = io.StringIO()
    test_console = Console(theme=get_theme(), file=buf, color_system=None, width=120)

    original_display_console = display_mod.console
    original_fmt_console = fmt_mod.console
    display_mod.console = test_console
    fmt_mod.console = test_console
    try:
        func(*args)  # type: ignore[operator]
    finally:
        display_mod.console = original_display_console
        fmt_mod.console = original_fmt_console

    return buf.getvalue()


class TestResultsTable:
    """Tests for create_results_table."""

    def test_columns_and_labels(self) -> None:
        """Each status gets its label."""
        step = TeardownStep(name="swap-teardown", executor=lambda c, p: StepResult.success())
        records = [
            StepRecord(step, StepResult.skipped("no active swap or zram devices")),
            StepRecord(step, StepResult.partial_failure("could not tear down: /dev/zram0")),
        ]

        table = create_results_table(records)
        output = _render(table)

        assert [c.header for c in table.columns] == ["Status", "Step", "Detail"]
        assert "SKIP" in output
        assert "WARN" in output
        assert "/dev/zram0" in output


class TestPlanTable:
    """Tests for create_plan_table."""

    def test_rows(self) -> None:
        """Targets and kept resources are shown per step."""
        plan = [PlannedStep("luks-close", ("extra1",), ("crypt",)), PlannedStep("flush")]

        table = create_plan_table(plan)
        output = _render(table)

        assert table.row_count == 2
        assert "extra1" in output
        assert "crypt" in output


class TestPrintAudit:
    """Tests for print_audit."""

    def test_clean(self) -> None:
        """A clean audit reports success lines."""
        output = _capture_console_output(
            print_audit, AuditReport(protected_mappings=("crypt",), network_status="disabled")
        )

        assert "No stray encrypted mappings." in output
        assert "Protected mappings still open: crypt" in output
        assert "Network: disabled" in output

    def test_residual_mounts(self) -> None:
        """Leftover mounts are listed."""
        output = _capture_console_output(print_audit, AuditReport(residual_mounts=("/mnt/usb",)))

        assert "Mounts still present: /mnt/usb" in output
