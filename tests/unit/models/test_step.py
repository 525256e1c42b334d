"""Unit tests for step and context models."""

import pytest
from cryptdown.models.context import ContainerRef, MapperEntry, TeardownContext
from cryptdown.models.step import StepResult, StepStatus, TeardownStep


class TestStepResult:
    """Tests for StepResult constructors."""

    def test_from_failures_success(self) -> None:
        """No failures gives SUCCESS."""
        result = StepResult.from_failures("unmount", [], ["/mnt/a"])

        assert result.status == StepStatus.SUCCESS
        assert result.handled == ("/mnt/a",)
        assert result.ok is True

    def test_from_failures_partial(self) -> None:
        """Any failure gives PARTIAL_FAILURE with a summary."""
        result = StepResult.from_failures("unmount", ["/mnt/a", "/mnt/b"], [])

        assert result.status == StepStatus.PARTIAL_FAILURE
        assert result.detail == "could not unmount: /mnt/a, /mnt/b"
        assert result.ok is False

    def test_skipped_is_ok(self) -> None:
        """A skipped step is not a failure."""
        assert StepResult.skipped("no swap").ok is True

    def test_frozen(self) -> None:
        """Results are immutable."""
        result = StepResult.success()
        with pytest.raises(AttributeError):
            result.detail = "changed"  # type: ignore[misc]


class TestTeardownStep:
    """Tests for TeardownStep."""

    def test_label_falls_back_to_name(self) -> None:
        """Without a title the name is shown."""
        step = TeardownStep(name="flush", executor=lambda c, p: StepResult.success())

        assert step.label == "flush"


class TestTeardownContext:
    """Tests for TeardownContext."""

    def test_obligations(self) -> None:
        """Obligations are recorded once each."""
        context = TeardownContext()
        assert context.owes_compensation is False

        context.add_obligation("network-down")
        context.add_obligation("network-down")

        assert context.obligations == ["network-down"]
        assert context.owes_compensation is True

    def test_snapshot_is_frozen(self) -> None:
        """Resource lists cannot be replaced after collection."""
        context = TeardownContext(interfaces=("enp3s0",))
        with pytest.raises(AttributeError):
            context.interfaces = ()  # type: ignore[misc]

    def test_container_ref_str(self) -> None:
        """Container references render as runtime:id."""
        assert str(ContainerRef("podman", "abc")) == "podman:abc"

    def test_mapper_entry(self) -> None:
        """Mapper entries know their device path and crypt type."""
        entry = MapperEntry("extra1", "crypt")

        assert entry.device_path == "/dev/mapper/extra1"
        assert entry.is_crypt is True
        assert MapperEntry("arch-vg-root", "lvm").is_crypt is False
