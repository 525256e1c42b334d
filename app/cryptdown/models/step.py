"""Teardown step models.

This module defines the ordered unit of teardown work and the result
each step reports. A step result never stops the sequence.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cryptdown.core.guards import ProtectedResourceSet
    from cryptdown.models.context import TeardownContext


class StepStatus(str, Enum):
    """Outcome category of a teardown step.

    Attributes:
        SUCCESS: Everything the step targeted was handled.
        SKIPPED: Nothing applicable was found (e.g. no container runtime).
        PARTIAL_FAILURE: Some resources could not be acted on.
    """

    SUCCESS = "success"
    SKIPPED = "skipped"
    PARTIAL_FAILURE = "partial_failure"


@dataclass(frozen=True, slots=True)
class StepResult:
    """Result reported by a step executor.

    Attributes:
        status: Outcome category.
        detail: Skip reason, failure summary or informational note.
        failed: Resources the step could not act on.
        handled: Resources the step acted on successfully.
    """

    status: StepStatus
    detail: str | None = None
    failed: tuple[str, ...] = ()
    handled: tuple[str, ...] = ()

    @classmethod
    def success(cls, detail: str | None = None, handled: tuple[str, ...] = ()) -> StepResult:
        """Build a SUCCESS result."""
        return cls(status=StepStatus.SUCCESS, detail=detail, handled=handled)

    @classmethod
    def skipped(cls, reason: str) -> StepResult:
        """Build a SKIPPED result."""
        return cls(status=StepStatus.SKIPPED, detail=reason)

    @classmethod
    def partial_failure(
        cls,
        detail: str,
        failed: tuple[str, ...] = (),
        handled: tuple[str, ...] = (),
    ) -> StepResult:
        """Build a PARTIAL_FAILURE result."""
        return cls(
            status=StepStatus.PARTIAL_FAILURE,
            detail=detail,
            failed=failed,
            handled=handled,
        )

    @classmethod
    def from_failures(
        cls,
        what: str,
        failed: list[str],
        handled: list[str],
    ) -> StepResult:
        """Build SUCCESS or PARTIAL_FAILURE from per-resource outcomes.

        Args:
            what: Short description of the resources, used in the detail.
            failed: Resources that could not be acted on.
            handled: Resources acted on successfully.
        """
        if failed:
            return cls.partial_failure(
                f"could not {what}: {', '.join(failed)}",
                failed=tuple(failed),
                handled=tuple(handled),
            )
        return cls.success(handled=tuple(handled))

    @property
    def ok(self) -> bool:
        """Check if the step finished without failures."""
        return self.status != StepStatus.PARTIAL_FAILURE


StepExecutor = Callable[["TeardownContext", "ProtectedResourceSet"], StepResult]


@dataclass(frozen=True, slots=True)
class TeardownStep:
    """One entry of the fixed teardown order.

    Attributes:
        name: Stable step identifier (e.g. ``network-down``).
        executor: Callable performing the step.
        compensable: Whether the step records a compensation obligation.
        title: Human-readable label for the status stream.
    """

    name: str
    executor: StepExecutor = field(repr=False)
    compensable: bool = False
    title: str = ""

    @property
    def label(self) -> str:
        """Label shown to the user."""
        return self.title or self.name
