"""Teardown sequencer.

Runs the steps strictly in order and never stops on a step failure.
Only an interruption or an unexpected fault ends the run early; both
lead to the Aborted state, in which the compensator restores
networking before the caller exits.

States: IDLE -> RUNNING -> COMPLETED | ABORTED
"""

from __future__ import annotations

import logging
import signal
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from types import FrameType

from cryptdown.core.audit import AuditReport
from cryptdown.core.compensator import Compensator
from cryptdown.core.guards import ProtectedResourceSet
from cryptdown.core.marker import CompensationMarker
from cryptdown.core.reporting import StatusReporter
from cryptdown.models.context import TeardownContext
from cryptdown.models.step import StepResult, StepStatus, TeardownStep

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAULT = 1
EXIT_INTERRUPTED = 130

# Signals converted to TeardownInterrupted while the steps run
ABORT_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGTERM, signal.SIGHUP)

# Signals ignored while compensation runs
SHIELDED_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM, signal.SIGHUP)


class SequenceState(str, Enum):
    """Lifecycle of a teardown run."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


class TeardownInterrupted(Exception):
    """Raised from a signal handler to cancel the running sequence.

    Attributes:
        signum: Signal number that triggered the interruption.
    """

    def __init__(self, signum: int) -> None:
        super().__init__(f"interrupted by signal {signum}")
        self.signum = signum


@contextmanager
def abort_signals(signals: Sequence[signal.Signals] = ABORT_SIGNALS) -> Iterator[None]:
    """Turn termination signals into TeardownInterrupted for the enclosed block.

    SIGINT already raises KeyboardInterrupt. Previous handlers are
    restored on exit.
    """

    def _interrupt(signum: int, frame: FrameType | None) -> None:
        raise TeardownInterrupted(signum)

    previous = {sig: signal.signal(sig, _interrupt) for sig in signals}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


@contextmanager
def shielded(signals: Sequence[signal.Signals] = SHIELDED_SIGNALS) -> Iterator[None]:
    """Ignore interruption signals for the enclosed block."""
    previous = {sig: signal.signal(sig, signal.SIG_IGN) for sig in signals}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


@dataclass(frozen=True, slots=True)
class StepRecord:
    """A step together with the result it reported."""

    step: TeardownStep
    result: StepResult


@dataclass(frozen=True)
class SequenceOutcome:
    """Final state of a teardown run.

    Attributes:
        state: COMPLETED or ABORTED.
        exit_code: 0 completed, 1 unexpected fault, 130 interrupted.
        records: Results of the steps that finished.
        audit: Final read-back, only for completed runs.
        failed_step: Step running when the sequence aborted.
        error: Description of the abort cause.
        compensated: Whether networking was restored during abort.
        obligations: Steps that recorded compensation obligations.
    """

    state: SequenceState
    exit_code: int
    records: tuple[StepRecord, ...] = ()
    audit: AuditReport | None = None
    failed_step: str | None = None
    error: str | None = None
    compensated: bool = False
    obligations: tuple[str, ...] = field(default_factory=tuple)

    @property
    def completed(self) -> bool:
        """Check if every step ran."""
        return self.state == SequenceState.COMPLETED

    @property
    def partial_failures(self) -> list[StepRecord]:
        """Steps that reported a partial failure."""
        return [r for r in self.records if r.result.status == StepStatus.PARTIAL_FAILURE]


class Sequencer:
    """Runs teardown steps in order with abort-and-compensate semantics.

    Example:
        >>> sequencer = Sequencer(steps, context, protected, compensator, marker)
        >>> outcome = sequencer.run()
        >>> raise SystemExit(outcome.exit_code)
    """

    def __init__(
        self,
        steps: Sequence[TeardownStep],
        context: TeardownContext,
        protected: ProtectedResourceSet,
        compensator: Compensator,
        marker: CompensationMarker,
        *,
        reporter: StatusReporter | None = None,
        auditor: Callable[[], AuditReport] | None = None,
        clear_marker: bool = True,
    ) -> None:
        """Initialize the sequencer.

        Args:
            steps: Steps in execution order.
            context: Resource snapshot shared by all steps.
            protected: Protected resource set.
            compensator: Restores networking on abort.
            marker: Compensation marker cleared on completion.
            reporter: Status stream.
            auditor: Produces the final read-back on completion.
            clear_marker: Remove the marker on completion (off for dry runs,
                which must not discard a marker left by an earlier run).
        """
        self._steps = tuple(steps)
        self._context = context
        self._protected = protected
        self._compensator = compensator
        self._marker = marker
        self._reporter = reporter or StatusReporter()
        self._auditor = auditor
        self._clear_marker = clear_marker
        self._state = SequenceState.IDLE
        self._step_index: int | None = None

    @property
    def state(self) -> SequenceState:
        """Current lifecycle state."""
        return self._state

    @property
    def step_index(self) -> int | None:
        """Index of the running (or last run) step."""
        return self._step_index

    @property
    def current_step(self) -> TeardownStep | None:
        """Step at ``step_index``, if any."""
        if self._step_index is None:
            return None
        return self._steps[self._step_index]

    def run(self) -> SequenceOutcome:
        """Run every step, then audit; abort and compensate on interruption.

        Returns:
            SequenceOutcome with the final state and exit code.

        Raises:
            RuntimeError: If the sequencer has already been run.
        """
        if self._state != SequenceState.IDLE:
            msg = f"Sequencer cannot run from state {self._state.value}"
            raise RuntimeError(msg)

        self._state = SequenceState.RUNNING
        records: list[StepRecord] = []
        try:
            with abort_signals():
                for index, step in enumerate(self._steps):
                    self._step_index = index
                    records.append(self._run_step(step))
                audit = self._auditor() if self._auditor is not None else None
        except (KeyboardInterrupt, TeardownInterrupted) as e:
            self._reporter.warn("Interrupted by user.")
            return self._abort(records, EXIT_INTERRUPTED, str(e) or "interrupted")
        except Exception as e:
            logger.exception("Unexpected error during %s", self._running_label())
            self._reporter.error("Unexpected error; aborting.")
            return self._abort(records, EXIT_FAULT, f"{type(e).__name__}: {e}")

        if self._clear_marker:
            self._marker.clear()
        self._state = SequenceState.COMPLETED
        return SequenceOutcome(
            state=self._state,
            exit_code=EXIT_OK,
            records=tuple(records),
            audit=audit,
            obligations=tuple(self._context.obligations),
        )

    def _run_step(self, step: TeardownStep) -> StepRecord:
        """Execute one step and report its result."""
        logger.info("Step %s started", step.name)
        result = step.executor(self._context, self._protected)

        if result.status == StepStatus.SUCCESS:
            self._reporter.ok(step.label if not result.detail else f"{step.label}: {result.detail}")
        elif result.status == StepStatus.SKIPPED:
            self._reporter.info(f"{step.label}: skipped ({result.detail})")
        else:
            self._reporter.warn(f"{step.label}: {result.detail}")
        logger.info("Step %s finished: %s", step.name, result.status.value)
        return StepRecord(step=step, result=result)

    def _abort(self, records: list[StepRecord], exit_code: int, error: str) -> SequenceOutcome:
        """Enter ABORTED, run the compensator and build the outcome."""
        self._state = SequenceState.ABORTED
        failed_step = self._running_label() if self._step_index is not None else None
        with shielded():
            compensated = self._compensator.restore_if_needed()
        return SequenceOutcome(
            state=self._state,
            exit_code=exit_code,
            records=tuple(records),
            failed_step=failed_step,
            error=error,
            compensated=compensated,
            obligations=tuple(self._context.obligations),
        )

    def _running_label(self) -> str:
        step = self.current_step
        return step.name if step is not None else "startup"
