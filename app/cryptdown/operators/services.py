"""Service stop operator."""

import logging

from cryptdown.core.guards import ProtectedResourceSet
from cryptdown.core.reporting import StatusReporter
from cryptdown.models.context import TeardownContext
from cryptdown.models.step import StepResult
from cryptdown.operators.base import Operator

logger = logging.getLogger(__name__)


class ServiceStopOperator(Operator):
    """Stops the active allow-listed service units.

    Each ``systemctl stop`` is bounded by the grace period; a unit that
    fails or takes longer is reported and the remaining units are still
    stopped.
    """

    def __init__(
        self,
        grace_seconds: int = 10,
        dry_run: bool = False,
        reporter: StatusReporter | None = None,
    ) -> None:
        super().__init__(dry_run=dry_run, reporter=reporter)
        self._grace_seconds = grace_seconds

    @property
    def name(self) -> str:
        return "service-stop"

    @property
    def title(self) -> str:
        return "Stop services"

    def run(self, context: TeardownContext, protected: ProtectedResourceSet) -> StepResult:
        """Stop every active unit from the snapshot."""
        units = list(context.services)
        if not units:
            return StepResult.success("no active services")

        if self.dry_run:
            return self._dry_run_result("stop", units)

        failed: list[str] = []
        stopped: list[str] = []
        for unit in units:
            self.reporter.info(f"Stopping {unit}…")
            error = self._execute(
                ["systemctl", "stop", unit],
                timeout=float(max(self._grace_seconds, 1)),
            )
            if error is None:
                stopped.append(unit)
            else:
                self.reporter.warn(f"Failed to stop {unit}: {error}")
                failed.append(unit)

        return StepResult.from_failures("stop", failed, stopped)
