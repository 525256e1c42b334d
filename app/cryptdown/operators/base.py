"""Abstract base class for teardown step operators.

This module defines the Operator interface that every teardown step
implements. Operators are best-effort: a failure on one resource is
reported and the operator moves on to the next one.
"""

import logging
import subprocess
from abc import ABC, abstractmethod

from cryptdown.core.guards import ProtectedResourceSet
from cryptdown.core.reporting import StatusReporter
from cryptdown.models.context import TeardownContext
from cryptdown.models.step import StepResult, TeardownStep
from cryptdown.utils.shell import run_command

logger = logging.getLogger(__name__)


class Operator(ABC):
    """Abstract base class for all teardown operators.

    Operators act only on resources listed in the TeardownContext and
    must be safe to run again after a partial failure.

    Attributes:
        dry_run: If True, only report what would be done.
        compensable: Whether running the operator creates a compensation
            obligation.

    Example:
        >>> operator = SwapOperator(dry_run=True)
        >>> result = operator.run(context, protected)
        >>> print(result.status)
    """

    compensable: bool = False

    def __init__(self, dry_run: bool = False, reporter: StatusReporter | None = None) -> None:
        """Initialize the operator.

        Args:
            dry_run: If True, only simulate actions without executing them.
            reporter: Status stream for advisory messages.
        """
        self._dry_run = dry_run
        self._reporter = reporter or StatusReporter()

    @property
    def dry_run(self) -> bool:
        """Check if operator is in dry-run mode."""
        return self._dry_run

    @property
    def reporter(self) -> StatusReporter:
        """Status stream used for advisory messages."""
        return self._reporter

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the stable step identifier."""

    @property
    def title(self) -> str:
        """Return a human-readable step label."""
        return self.name

    @abstractmethod
    def run(self, context: TeardownContext, protected: ProtectedResourceSet) -> StepResult:
        """Execute the step.

        Args:
            context: Resource snapshot taken at sequence start.
            protected: Resources that must never be acted on.

        Returns:
            StepResult describing the outcome. Per-resource failures are
            folded into the result rather than raised.
        """

    def as_step(self) -> TeardownStep:
        """Wrap the operator as an entry of the teardown order."""
        return TeardownStep(
            name=self.name,
            executor=self.run,
            compensable=self.compensable,
            title=self.title,
        )

    def _execute(
        self,
        args: list[str],
        *,
        timeout: float | None = 60.0,
        env: dict[str, str] | None = None,
    ) -> str | None:
        """Run one command, turning failures into an error description.

        Args:
            args: Command and arguments.
            timeout: Maximum seconds to wait.
            env: Extra environment variables.

        Returns:
            None on success, otherwise a short error description.
        """
        label = " ".join(args)
        logger.info("Running: %s", label)
        try:
            result = run_command(args, timeout=timeout, env=env)
        except subprocess.TimeoutExpired:
            logger.warning("%s timed out after %ss", label, timeout)
            return f"timed out after {timeout:g}s"
        except OSError as e:
            logger.warning("%s could not be executed: %s", label, e)
            return str(e)

        if result.success:
            return None
        logger.warning("%s failed: %s", label, result.error_text)
        return result.error_text

    def _dry_run_result(self, what: str, targets: list[str]) -> StepResult:
        """Build the result reported in dry-run mode."""
        logger.info("Dry-run: would %s %s", what, targets)
        if targets:
            return StepResult.success(f"Dry-run: would {what}: {', '.join(targets)}")
        return StepResult.success(f"Dry-run: would {what}")
