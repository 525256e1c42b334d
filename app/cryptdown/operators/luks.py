"""Encrypted volume close operator."""

import logging

from cryptdown.core.guards import ProtectedResourceSet
from cryptdown.core.reporting import StatusReporter
from cryptdown.models.context import MapperEntry, TeardownContext
from cryptdown.models.step import StepResult
from cryptdown.operators.base import Operator
from cryptdown.scanners.mapper import CONTROL_DEVICE, MapperScanner

logger = logging.getLogger(__name__)


def closable_mappings(
    context: TeardownContext,
    protected: ProtectedResourceSet,
) -> list[MapperEntry]:
    """Select mappings the operator may close.

    Excludes the device-mapper control node, protected mappings and
    anything that is not an encrypted mapping.

    Args:
        context: Resource snapshot.
        protected: Protected resource set.

    Returns:
        Closable encrypted mappings, in snapshot order.
    """
    return [
        entry
        for entry in context.mappings
        if entry.name != CONTROL_DEVICE
        and not protected.is_protected_mapping(entry.name)
        and entry.is_crypt
    ]


class LuksCloseOperator(Operator):
    """Closes non-root LUKS mappings after unmounting anything left on them."""

    def __init__(
        self,
        mapper: MapperScanner | None = None,
        dry_run: bool = False,
        reporter: StatusReporter | None = None,
    ) -> None:
        """Initialize the operator.

        Args:
            mapper: Scanner used to check that a mapping still exists.
            dry_run: If True, only report what would be closed.
            reporter: Status stream for advisory messages.
        """
        super().__init__(dry_run=dry_run, reporter=reporter)
        self._mapper = mapper or MapperScanner()

    @property
    def name(self) -> str:
        return "luks-close"

    @property
    def title(self) -> str:
        return "Close encrypted volumes"

    def run(self, context: TeardownContext, protected: ProtectedResourceSet) -> StepResult:
        for entry in context.mappings:
            if protected.is_protected_mapping(entry.name):
                logger.info("Leaving protected mapping %s open", entry.name)

        candidates = closable_mappings(context, protected)
        if not candidates:
            return StepResult.skipped("no non-root encrypted mappings")

        if self.dry_run:
            return self._dry_run_result("close", [e.name for e in candidates])

        failed: list[str] = []
        closed: list[str] = []
        for entry in candidates:
            # Guard again right before the destructive call
            if protected.is_protected_mapping(entry.name):
                continue
            if not self._mapper.exists(entry.name):
                logger.info("Mapping %s already closed", entry.name)
                closed.append(entry.name)
                continue

            self.reporter.info(f"Closing LUKS map: {entry.name}")
            # Nothing mounted from the mapping is the normal case here
            self._execute(["umount", "-R", entry.device_path], timeout=60.0)
            error = self._execute(["cryptsetup", "close", entry.name], timeout=60.0)
            if error is None:
                closed.append(entry.name)
            else:
                self.reporter.warn(f"could not close {entry.name}: {error}")
                failed.append(entry.name)

        return StepResult.from_failures("close", failed, closed)
