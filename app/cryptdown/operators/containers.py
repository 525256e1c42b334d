"""Container stop operator."""

import logging

from cryptdown.core.guards import ProtectedResourceSet
from cryptdown.core.reporting import StatusReporter
from cryptdown.models.context import TeardownContext
from cryptdown.models.step import StepResult
from cryptdown.operators.base import Operator

logger = logging.getLogger(__name__)

# Extra time allowed for the runtime CLI beyond the stop grace period
_CLI_MARGIN_SECONDS = 30.0


class ContainerStopOperator(Operator):
    """Gracefully stops running containers across all detected runtimes.

    Containers are stopped one at a time with ``<runtime> stop --time N``
    so a single stuck container is attributed and does not prevent the
    others from stopping.
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
        return "container-stop"

    @property
    def title(self) -> str:
        return "Stop containers"

    def run(self, context: TeardownContext, protected: ProtectedResourceSet) -> StepResult:
        """Stop every container listed in the snapshot."""
        if not context.runtimes:
            return StepResult.skipped("no container runtime detected")

        containers = list(context.containers)
        if not containers:
            return StepResult.success(f"no running containers ({', '.join(context.runtimes)})")

        if self.dry_run:
            return self._dry_run_result("stop", [str(c) for c in containers])

        failed: list[str] = []
        stopped: list[str] = []
        for runtime in context.runtimes:
            batch = [c for c in containers if c.runtime == runtime]
            if not batch:
                continue
            self.reporter.info(f"Stopping {runtime} containers…")
            for container in batch:
                error = self._execute(
                    [runtime, "stop", "--time", str(self._grace_seconds), container.container_id],
                    timeout=self._grace_seconds + _CLI_MARGIN_SECONDS,
                )
                if error is None:
                    stopped.append(str(container))
                else:
                    self.reporter.warn(
                        f"{runtime} stop issues on {container.container_id}: {error}"
                    )
                    failed.append(str(container))

        return StepResult.from_failures("stop", failed, stopped)
