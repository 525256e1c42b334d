"""Teardown orchestration.

Wires configuration, scanners, operators, the compensator and the
sequencer together. Shared by the ``run`` and ``plan`` CLI commands.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING

from cryptdown.core.audit import run_audit
from cryptdown.core.compensator import Compensator
from cryptdown.core.marker import CompensationMarker
from cryptdown.core.sequencer import SequenceOutcome, Sequencer
from cryptdown.core.snapshot import collect_context, collect_protected
from cryptdown.core.steps import STEP_ORDER, build_steps
from cryptdown.network import NetworkBackend, select_backend
from cryptdown.operators.luks import closable_mappings
from cryptdown.operators.unmount import filter_targets

if TYPE_CHECKING:
    from cryptdown.core.config import TeardownConfig
    from cryptdown.core.guards import ProtectedResourceSet
    from cryptdown.core.reporting import StatusReporter
    from cryptdown.models.context import TeardownContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlannedStep:
    """What one step would act on, after guard filtering.

    Attributes:
        name: Step identifier.
        targets: Resources the step would act on.
        kept: Resources left alone because they are protected.
    """

    name: str
    targets: tuple[str, ...] = ()
    kept: tuple[str, ...] = ()


def create_sequencer(
    config: TeardownConfig,
    *,
    marker: CompensationMarker | None = None,
    reporter: StatusReporter | None = None,
    backend: NetworkBackend | None = None,
    dry_run: bool = False,
) -> Sequencer:
    """Collect the snapshot and build a ready-to-run sequencer.

    Args:
        config: Teardown configuration.
        marker: Compensation marker (default location if None).
        reporter: Status stream.
        backend: Network backend (best available if None).
        dry_run: Whether operators only report.

    Returns:
        Sequencer in the IDLE state.
    """
    marker = marker or CompensationMarker()
    backend = backend or select_backend()
    logger.debug("Using network backend %s", backend.name)

    protected = collect_protected(config)
    context = collect_context(config)
    steps = build_steps(config, backend, marker, reporter=reporter, dry_run=dry_run)

    return Sequencer(
        steps,
        context,
        protected,
        Compensator(marker, backend, reporter),
        marker,
        reporter=reporter,
        auditor=partial(run_audit, config, protected, backend),
        clear_marker=not dry_run,
    )


def run_teardown(
    config: TeardownConfig,
    *,
    marker: CompensationMarker | None = None,
    reporter: StatusReporter | None = None,
    backend: NetworkBackend | None = None,
    dry_run: bool = False,
) -> SequenceOutcome:
    """Run the complete teardown sequence.

    Returns:
        SequenceOutcome of the run.
    """
    sequencer = create_sequencer(
        config, marker=marker, reporter=reporter, backend=backend, dry_run=dry_run
    )
    return sequencer.run()


def plan_steps(context: TeardownContext, protected: ProtectedResourceSet) -> list[PlannedStep]:
    """Describe what each step would act on, without acting.

    Args:
        context: Resource snapshot.
        protected: Protected resource set.

    Returns:
        One PlannedStep per entry of STEP_ORDER.
    """
    unmount_targets: list[str] = []
    unmount_kept: list[str] = []
    for tree in context.mount_trees:
        targets = filter_targets(tree, protected)
        unmount_targets.extend(targets)
        unmount_kept.extend(t for t in tree.targets if t not in targets)

    zram_only = tuple(z for z in context.zram_devices if z not in context.swap_devices)

    by_name = {
        "service-stop": PlannedStep("service-stop", context.services),
        "container-stop": PlannedStep(
            "container-stop", tuple(str(c) for c in context.containers)
        ),
        "credential-clear": PlannedStep(
            "credential-clear", (context.agent_socket,) if context.agent_socket else ()
        ),
        "network-down": PlannedStep("network-down", context.interfaces),
        "unmount": PlannedStep("unmount", tuple(unmount_targets), tuple(unmount_kept)),
        "luks-close": PlannedStep(
            "luks-close",
            tuple(e.name for e in closable_mappings(context, protected)),
            tuple(e.name for e in context.mappings if protected.is_protected_mapping(e.name)),
        ),
        "swap-teardown": PlannedStep("swap-teardown", context.swap_devices + zram_only),
        "flush": PlannedStep("flush"),
    }
    return [by_name[name] for name in STEP_ORDER]
