"""Unit tests for teardown orchestration and planning."""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from cryptdown.core.config import TeardownConfig
from cryptdown.core.executor import create_sequencer, plan_steps
from cryptdown.core.guards import ProtectedResourceSet
from cryptdown.core.marker import CompensationMarker, MarkerState
from cryptdown.core.sequencer import EXIT_INTERRUPTED, SequenceState
from cryptdown.core.steps import STEP_ORDER, build_steps
from cryptdown.models.context import ContainerRef, MapperEntry, MountTree, TeardownContext
from cryptdown.models.step import StepStatus
from cryptdown.utils.shell import CommandResult


def _context() -> TeardownContext:
    return TeardownContext(
        services=("libvirtd.service",),
        runtimes=("podman",),
        containers=(ContainerRef("podman", "abc123"),),
        agent_socket="/run/user/1000/ssh-agent.sock",
        interfaces=("enp3s0",),
        mount_trees=(
            MountTree("/mnt", ("/mnt/usb/sub", "/mnt/usb")),
            MountTree("/run/media", ()),
        ),
        mappings=(
            MapperEntry("arch-vg-root", "lvm"),
            MapperEntry("control", None),
            MapperEntry("crypt", "crypt"),
            MapperEntry("extra1", "crypt"),
        ),
        swap_devices=("/dev/zram0",),
        zram_devices=("/dev/zram0", "/dev/zram1"),
    )


class TestPlanSteps:
    """Tests for plan_steps."""

    def test_one_entry_per_step(self, protected: ProtectedResourceSet) -> None:
        """The plan follows the fixed order."""
        plan = plan_steps(_context(), protected)

        assert [p.name for p in plan] == list(STEP_ORDER)

    def test_targets(self, protected: ProtectedResourceSet) -> None:
        """Targets reflect the snapshot after guard filtering."""
        plan = {p.name: p for p in plan_steps(_context(), protected)}

        assert plan["service-stop"].targets == ("libvirtd.service",)
        assert plan["container-stop"].targets == ("podman:abc123",)
        assert plan["network-down"].targets == ("enp3s0",)
        assert plan["unmount"].targets == ("/mnt/usb/sub", "/mnt/usb")
        assert plan["luks-close"].targets == ("extra1",)
        assert plan["luks-close"].kept == ("arch-vg-root", "crypt")
        assert plan["swap-teardown"].targets == ("/dev/zram0", "/dev/zram1")
        assert plan["flush"].targets == ()

    def test_protected_mounts_kept(self, protected: ProtectedResourceSet) -> None:
        """A protected mount under a watched tree is listed as kept."""
        context = TeardownContext(mount_trees=(MountTree("/", ("/mnt/x", "/home", "/")),))

        plan = {p.name: p for p in plan_steps(context, protected)}

        assert plan["unmount"].targets == ("/mnt/x",)
        assert plan["unmount"].kept == ("/home", "/")


class TestBuildSteps:
    """Tests for build_steps."""

    def test_order_and_compensable(
        self, config: TeardownConfig, marker: CompensationMarker, backend: Any
    ) -> None:
        """Steps come in the fixed order; only network-down is compensable."""
        steps = build_steps(config, backend, marker)

        assert tuple(s.name for s in steps) == STEP_ORDER
        assert [s.name for s in steps if s.compensable] == ["network-down"]


class TestCreateSequencer:
    """Tests for create_sequencer wiring."""

    def test_dry_run_changes_nothing(
        self,
        config: TeardownConfig,
        marker: CompensationMarker,
        backend: Any,
        protected: ProtectedResourceSet,
    ) -> None:
        """A dry run completes without touching network or marker."""
        marker.write(MarkerState(backend="nmcli"))

        with (
            patch("cryptdown.core.executor.collect_protected", return_value=protected),
            patch("cryptdown.core.executor.collect_context", return_value=_context()),
            patch("cryptdown.core.executor.run_audit") as mock_audit,
            patch("cryptdown.operators.base.run_command") as mock_run,
            patch("cryptdown.operators.agent.is_socket", return_value=False),
        ):
            sequencer = create_sequencer(config, marker=marker, backend=backend, dry_run=True)
            outcome = sequencer.run()

        assert outcome.state == SequenceState.COMPLETED
        assert outcome.audit is mock_audit.return_value
        mock_run.assert_not_called()
        assert backend.calls == []
        assert marker.exists() is True
        assert all(
            r.result.detail is None or "Dry-run" in r.result.detail or "no agent" in r.result.detail
            for r in outcome.records
        )


@contextmanager
def _host(
    protected: ProtectedResourceSet,
    context: TeardownContext,
    *,
    mounted: Any = False,
) -> Iterator[MagicMock]:
    """Run real operators against a scripted host; yields the command mock."""
    if isinstance(mounted, BaseException):
        mount_check = patch("cryptdown.operators.unmount.is_mounted", side_effect=mounted)
    else:
        mount_check = patch("cryptdown.operators.unmount.is_mounted", return_value=mounted)

    with (
        patch("cryptdown.core.executor.collect_protected", return_value=protected),
        patch("cryptdown.core.executor.collect_context", return_value=context),
        patch("cryptdown.core.executor.run_audit"),
        patch(
            "cryptdown.operators.base.run_command",
            return_value=CommandResult(stdout="", stderr="", returncode=0),
        ) as mock_run,
        mount_check,
        patch("cryptdown.scanners.mapper.MapperScanner.exists", return_value=True),
        patch("cryptdown.operators.flush.start_background") as mock_sync,
    ):
        mock_sync.return_value.poll.return_value = 0
        yield mock_run


class TestTeardownScenarios:
    """Whole-sequence runs through create_sequencer with the real operators."""

    @pytest.fixture
    def live_config(self, tmp_path: Path) -> TeardownConfig:
        return TeardownConfig(drop_caches_path=str(tmp_path / "drop_caches"))

    def test_bare_host(
        self,
        live_config: TeardownConfig,
        marker: CompensationMarker,
        backend: Any,
        protected: ProtectedResourceSet,
    ) -> None:
        """No runtime, no extra volumes, no swap: three skips, the rest succeed."""
        context = TeardownContext(
            interfaces=("enp3s0",),
            mappings=(MapperEntry("arch-vg-root", "lvm"), MapperEntry("crypt", "crypt")),
        )

        with _host(protected, context) as mock_run:
            outcome = create_sequencer(live_config, marker=marker, backend=backend).run()

        statuses = {r.step.name: r.result.status for r in outcome.records}
        assert outcome.state == SequenceState.COMPLETED
        assert [n for n, s in statuses.items() if s == StepStatus.SKIPPED] == [
            "container-stop",
            "luks-close",
            "swap-teardown",
        ]
        assert [n for n, s in statuses.items() if s == StepStatus.SUCCESS] == [
            "service-stop",
            "credential-clear",
            "network-down",
            "unmount",
            "flush",
        ]
        mock_run.assert_not_called()
        assert backend.calls == [("disable", ("enp3s0",))]
        assert marker.exists() is False

    def test_extra_volume_closed_root_untouched(
        self,
        live_config: TeardownConfig,
        marker: CompensationMarker,
        backend: Any,
        protected: ProtectedResourceSet,
    ) -> None:
        """extra1 is closed; the volume-group and root mappings are never touched."""
        context = TeardownContext(
            interfaces=("enp3s0",),
            mappings=(
                MapperEntry("arch-vg-root", "crypt"),
                MapperEntry("control", None),
                MapperEntry("crypt", "crypt"),
                MapperEntry("extra1", "crypt"),
            ),
        )

        with _host(protected, context) as mock_run:
            outcome = create_sequencer(live_config, marker=marker, backend=backend).run()

        commands = [c.args[0] for c in mock_run.call_args_list]
        records = {r.step.name: r.result for r in outcome.records}
        assert outcome.state == SequenceState.COMPLETED
        assert records["luks-close"].status == StepStatus.SUCCESS
        assert commands == [
            ["umount", "-R", "/dev/mapper/extra1"],
            ["cryptsetup", "close", "extra1"],
        ]
        assert not any("arch-vg-root" in arg or arg == "crypt" for c in commands for arg in c)

    def test_cancel_during_unmount(
        self,
        live_config: TeardownConfig,
        marker: CompensationMarker,
        backend: Any,
        protected: ProtectedResourceSet,
    ) -> None:
        """Cancelling while unmounting restores networking and stops the run."""
        context = TeardownContext(
            interfaces=("enp3s0",),
            mount_trees=(MountTree("/mnt", ("/mnt/usb",)),),
            mappings=(MapperEntry("extra1", "crypt"),),
        )

        with _host(protected, context, mounted=KeyboardInterrupt()) as mock_run:
            outcome = create_sequencer(live_config, marker=marker, backend=backend).run()

        assert outcome.state == SequenceState.ABORTED
        assert outcome.exit_code == EXIT_INTERRUPTED
        assert outcome.failed_step == "unmount"
        assert outcome.compensated is True
        assert backend.calls == [("disable", ("enp3s0",)), ("restore", ("enp3s0",))]
        assert marker.exists() is False
        mock_run.assert_not_called()
