"""Network teardown operator.

The only compensable step. The compensation marker is written before
any network change, so an interruption at any later point still knows
that networking has to be restored.
"""

import logging

from cryptdown.core.guards import ProtectedResourceSet
from cryptdown.core.marker import CompensationMarker, MarkerState
from cryptdown.core.reporting import StatusReporter
from cryptdown.models.context import TeardownContext
from cryptdown.models.step import StepResult
from cryptdown.network import NetworkBackend
from cryptdown.operators.base import Operator

logger = logging.getLogger(__name__)


class NetworkDownOperator(Operator):
    """Disables radios and networking through the selected backend."""

    compensable = True

    def __init__(
        self,
        backend: NetworkBackend,
        marker: CompensationMarker,
        dry_run: bool = False,
        reporter: StatusReporter | None = None,
    ) -> None:
        super().__init__(dry_run=dry_run, reporter=reporter)
        self._backend = backend
        self._marker = marker
        self._marker_written = False

    @property
    def name(self) -> str:
        return "network-down"

    @property
    def title(self) -> str:
        return "Disable networking"

    @property
    def backend(self) -> NetworkBackend:
        """Backend used to take networking down."""
        return self._backend

    def run(self, context: TeardownContext, protected: ProtectedResourceSet) -> StepResult:
        """Write the marker, record the obligation, then take networking down.

        Raises:
            OSError: If the compensation marker cannot be written. Networking
                is left untouched in that case.
        """
        if self.dry_run:
            return self._dry_run_result(f"disable networking ({self._backend.name})", [])

        if not self._marker_written:
            self._marker.write(
                MarkerState(backend=self._backend.name, interfaces=list(context.interfaces))
            )
            self._marker_written = True
        context.add_obligation(self.name)

        if self._backend.name == "nmcli":
            self.reporter.info("Disabling networking (nmcli)…")
        else:
            self.reporter.info("Bringing non-loopback interfaces down…")

        failures = self._backend.disable(context.interfaces)
        for failure in failures:
            self.reporter.warn(f"Network teardown step failed: {failure}")

        if failures:
            return StepResult.partial_failure(
                f"network teardown incomplete ({len(failures)} command(s) failed)",
                failed=tuple(failures),
            )
        return StepResult.success(f"networking disabled via {self._backend.name}")
