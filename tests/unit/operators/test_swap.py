"""Unit tests for SwapOperator and FlushOperator."""

from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

from cryptdown.core.guards import ProtectedResourceSet
from cryptdown.models.context import TeardownContext
from cryptdown.models.step import StepStatus
from cryptdown.operators.flush import FlushOperator
from cryptdown.operators.swap import SwapOperator
from cryptdown.utils.shell import CommandResult

OK = CommandResult(stdout="", stderr="", returncode=0)


class TestSwapOperator:
    """Tests for SwapOperator."""

    def test_nothing_to_do(self, protected: ProtectedResourceSet) -> None:
        """No swap and no zram means skipped."""
        result = SwapOperator().run(TeardownContext(), protected)

        assert result.status == StepStatus.SKIPPED
        assert result.detail == "no active swap or zram devices"

    def test_swapoff_before_reset(self, protected: ProtectedResourceSet) -> None:
        """Swap goes off before each zram device is reset."""
        context = TeardownContext(
            swap_devices=("/dev/zram0",), zram_devices=("/dev/zram0", "/dev/zram1")
        )

        with patch("cryptdown.operators.base.run_command", return_value=OK) as mock_run:
            result = SwapOperator().run(context, protected)

        assert result.status == StepStatus.SUCCESS
        assert [c[0][0] for c in mock_run.call_args_list] == [
            ["swapoff", "-a"],
            ["swapoff", "/dev/zram0"],
            ["zramctl", "--reset", "/dev/zram0"],
            ["zramctl", "--reset", "/dev/zram1"],
        ]

    def test_reset_failure(self, protected: ProtectedResourceSet) -> None:
        """A zram device that cannot be reset is reported."""
        context = TeardownContext(zram_devices=("/dev/zram0",))
        busy = CommandResult("", "zramctl: /dev/zram0: failed to reset: Device busy", 1)

        with patch("cryptdown.operators.base.run_command", return_value=busy):
            result = SwapOperator().run(context, protected)

        assert result.status == StepStatus.PARTIAL_FAILURE
        assert result.failed == ("/dev/zram0",)


class TestFlushOperator:
    """Tests for FlushOperator."""

    def test_syncs_and_drops_caches(
        self, tmp_path: Path, protected: ProtectedResourceSet, reporter: Any
    ) -> None:
        """Sync runs the configured number of times, then caches are dropped."""
        knob = tmp_path / "drop_caches"
        reporter.wait = MagicMock(return_value=0)
        operator = FlushOperator(sync_passes=3, drop_caches_path=knob, reporter=reporter)

        with patch("cryptdown.operators.flush.start_background") as mock_start:
            result = operator.run(TeardownContext(), protected)

        assert mock_start.call_count == 3
        mock_start.assert_called_with(["sync"])
        assert reporter.wait.call_count == 3
        assert knob.read_text() == "3"
        assert result.status == StepStatus.SUCCESS

    def test_drop_caches_failure_warns(
        self, tmp_path: Path, protected: ProtectedResourceSet, reporter: Any
    ) -> None:
        """An unwritable knob is a partial failure, not a fault."""
        reporter.wait = MagicMock(return_value=0)
        operator = FlushOperator(
            sync_passes=1, drop_caches_path=tmp_path / "missing" / "knob", reporter=reporter
        )

        with patch("cryptdown.operators.flush.start_background"):
            result = operator.run(TeardownContext(), protected)

        assert result.status == StepStatus.PARTIAL_FAILURE
        assert "could not drop caches" in reporter.texts("warn")

    def test_falls_back_to_os_sync(
        self, tmp_path: Path, protected: ProtectedResourceSet, reporter: Any
    ) -> None:
        """Without a sync binary the kernel sync call is used."""
        operator = FlushOperator(
            sync_passes=2, drop_caches_path=tmp_path / "knob", reporter=reporter
        )

        with (
            patch("cryptdown.operators.flush.start_background", side_effect=FileNotFoundError),
            patch("cryptdown.operators.flush.os.sync") as mock_sync,
        ):
            operator.run(TeardownContext(), protected)

        assert mock_sync.call_count == 2
