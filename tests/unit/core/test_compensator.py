"""Unit tests for the network compensator."""

from typing import Any
from unittest.mock import patch

from cryptdown.core.compensator import Compensator
from cryptdown.core.guards import ProtectedResourceSet
from cryptdown.core.marker import CompensationMarker, MarkerState
from cryptdown.models.context import TeardownContext
from cryptdown.operators.network import NetworkDownOperator


class TestCompensator:
    """Tests for Compensator.restore_if_needed."""

    def test_noop_without_marker(self, marker: CompensationMarker, backend: Any) -> None:
        """Nothing happens when no compensation is owed."""
        compensator = Compensator(marker, backend)

        assert compensator.restore_if_needed() is False
        assert backend.calls == []

    def test_restores_and_clears(
        self, marker: CompensationMarker, backend: Any, reporter: Any
    ) -> None:
        """Networking is restored and the marker removed."""
        marker.write(MarkerState(backend="nmcli", interfaces=["enp3s0"]))
        compensator = Compensator(marker, backend, reporter)

        with patch("cryptdown.core.compensator.get_backend", return_value=None):
            restored = compensator.restore_if_needed()

        assert restored is True
        assert backend.calls == [("restore", ("enp3s0",))]
        assert marker.exists() is False
        assert "Networking restored." in reporter.texts("ok")

    def test_idempotent(self, marker: CompensationMarker, backend: Any) -> None:
        """A second call after success does nothing."""
        marker.write(MarkerState(backend="unknown"))
        compensator = Compensator(marker, backend)

        compensator.restore_if_needed()
        compensator.restore_if_needed()

        assert len(backend.calls) == 1

    def test_uses_backend_named_in_marker(self, marker: CompensationMarker, backend: Any) -> None:
        """The backend that took networking down also restores it."""
        marker.write(MarkerState(backend="iplink", interfaces=["eth0"]))
        compensator = Compensator(marker, backend)

        with patch("cryptdown.core.compensator.get_backend") as mock_get:
            mock_get.return_value.restore.return_value = []
            mock_get.return_value.name = "iplink"
            compensator.restore_if_needed()

        mock_get.assert_called_once_with("iplink")
        mock_get.return_value.restore.assert_called_once_with(("eth0",))
        assert backend.calls == []

    def test_failed_restore_keeps_marker(
        self, marker: CompensationMarker, failing_backend: Any, reporter: Any
    ) -> None:
        """The marker survives a failed restore so it can be retried."""
        marker.write(MarkerState(backend="unknown"))
        compensator = Compensator(marker, failing_backend, reporter)

        assert compensator.restore_if_needed() is False
        assert marker.exists() is True
        assert reporter.texts("warn")

    def test_never_raises(self, marker: CompensationMarker, backend: Any, reporter: Any) -> None:
        """Unexpected errors are logged, not raised."""
        marker.write(MarkerState(backend="unknown"))
        compensator = Compensator(marker, backend, reporter)

        with patch.object(backend, "restore", side_effect=RuntimeError("boom")):
            assert compensator.restore_if_needed() is False

        assert reporter.texts("error")

    def test_restores_through_startup_backend(
        self, marker: CompensationMarker, backend: Any, protected: ProtectedResourceSet
    ) -> None:
        """The backend that took networking down in this run brings it back."""
        context = TeardownContext(interfaces=("enp3s0",))
        NetworkDownOperator(backend, marker).run(context, protected)

        restored = Compensator(marker, backend).restore_if_needed()

        assert restored is True
        assert backend.calls == [("disable", ("enp3s0",)), ("restore", ("enp3s0",))]
        assert backend.network_up is True
        assert marker.exists() is False

    def test_matching_name_skips_lookup(self, marker: CompensationMarker, backend: Any) -> None:
        """No second backend is built when the marker names the startup one."""
        marker.write(MarkerState(backend=backend.name, interfaces=["wlan0"]))

        with patch("cryptdown.core.compensator.get_backend") as mock_get:
            Compensator(marker, backend).restore_if_needed()

        mock_get.assert_not_called()
        assert backend.calls == [("restore", ("wlan0",))]
