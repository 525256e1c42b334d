"""Writeback and cache drop operator."""

import logging
import os
from pathlib import Path

from cryptdown.core.guards import ProtectedResourceSet
from cryptdown.core.reporting import StatusReporter
from cryptdown.models.context import TeardownContext
from cryptdown.models.step import StepResult
from cryptdown.operators.base import Operator
from cryptdown.utils.shell import start_background

logger = logging.getLogger(__name__)


class FlushOperator(Operator):
    """Syncs filesystems several times, then drops kernel caches.

    Each sync runs in the background while the reporter shows progress.
    Dropping caches is advisory; failure to do so only warns.
    """

    def __init__(
        self,
        sync_passes: int = 3,
        drop_caches_path: Path = Path("/proc/sys/vm/drop_caches"),
        drop_caches_value: str = "3",
        dry_run: bool = False,
        reporter: StatusReporter | None = None,
    ) -> None:
        super().__init__(dry_run=dry_run, reporter=reporter)
        self._sync_passes = sync_passes
        self._drop_caches_path = drop_caches_path
        self._drop_caches_value = drop_caches_value

    @property
    def name(self) -> str:
        return "flush"

    @property
    def title(self) -> str:
        return "Flush buffers and drop caches"

    def run(self, context: TeardownContext, protected: ProtectedResourceSet) -> StepResult:
        if self.dry_run:
            return self._dry_run_result(
                f"sync {self._sync_passes}x and drop caches via {self._drop_caches_path}", []
            )

        self.reporter.info("Syncing filesystems…")
        for _ in range(self._sync_passes):
            self._sync_once()

        self.reporter.info("Dropping pagecache/dentries/inodes…")
        try:
            self._drop_caches_path.write_text(self._drop_caches_value, encoding="ascii")
        except OSError as e:
            logger.warning("Writing %s failed: %s", self._drop_caches_path, e)
            self.reporter.warn("could not drop caches")
            return StepResult.partial_failure(
                f"could not drop caches: {e}", failed=(str(self._drop_caches_path),)
            )
        return StepResult.success("buffers flushed, caches dropped")

    def _sync_once(self) -> None:
        """Issue one sync in the background and wait for it with progress."""
        try:
            process = start_background(["sync"])
        except OSError as e:
            logger.warning("Could not start sync: %s; syncing in-process", e)
            os.sync()
            return
        self.reporter.wait("Flushing buffers…", process)
