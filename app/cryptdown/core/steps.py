"""The fixed teardown order.

Services and containers release file handles before anything is
unmounted, networking goes down before anything a remote peer could
influence, unmounting precedes closing the mappings underneath, and
swap is off before the zram device backing it is reset.
"""

from pathlib import Path

from cryptdown.core.config import TeardownConfig
from cryptdown.core.marker import CompensationMarker
from cryptdown.core.reporting import StatusReporter
from cryptdown.models.step import TeardownStep
from cryptdown.network import NetworkBackend
from cryptdown.operators.agent import CredentialAgentOperator
from cryptdown.operators.base import Operator
from cryptdown.operators.containers import ContainerStopOperator
from cryptdown.operators.flush import FlushOperator
from cryptdown.operators.luks import LuksCloseOperator
from cryptdown.operators.network import NetworkDownOperator
from cryptdown.operators.services import ServiceStopOperator
from cryptdown.operators.swap import SwapOperator
from cryptdown.operators.unmount import UnmountOperator
from cryptdown.scanners.mapper import MapperScanner

STEP_ORDER: tuple[str, ...] = (
    "service-stop",
    "container-stop",
    "credential-clear",
    "network-down",
    "unmount",
    "luks-close",
    "swap-teardown",
    "flush",
)


def build_operators(
    config: TeardownConfig,
    backend: NetworkBackend,
    marker: CompensationMarker,
    *,
    reporter: StatusReporter | None = None,
    dry_run: bool = False,
    mapper: MapperScanner | None = None,
) -> list[Operator]:
    """Instantiate one operator per teardown concern, in STEP_ORDER.

    Args:
        config: Teardown configuration.
        backend: Network backend selected at startup.
        marker: Compensation marker written by the network step.
        reporter: Status stream shared by all operators.
        dry_run: Whether operators only report.
        mapper: Device-mapper scanner used by the LUKS step.

    Returns:
        Operators in execution order.
    """
    common = {"dry_run": dry_run, "reporter": reporter}
    return [
        ServiceStopOperator(grace_seconds=config.stop_grace_seconds, **common),
        ContainerStopOperator(grace_seconds=config.stop_grace_seconds, **common),
        CredentialAgentOperator(**common),
        NetworkDownOperator(backend, marker, **common),
        UnmountOperator(**common),
        LuksCloseOperator(mapper=mapper, **common),
        SwapOperator(**common),
        FlushOperator(
            sync_passes=config.sync_passes,
            drop_caches_path=Path(config.drop_caches_path),
            drop_caches_value=config.drop_caches_value,
            **common,
        ),
    ]


def build_steps(
    config: TeardownConfig,
    backend: NetworkBackend,
    marker: CompensationMarker,
    *,
    reporter: StatusReporter | None = None,
    dry_run: bool = False,
    mapper: MapperScanner | None = None,
) -> tuple[TeardownStep, ...]:
    """Build the ordered teardown steps.

    Returns:
        Steps in STEP_ORDER.
    """
    operators = build_operators(
        config, backend, marker, reporter=reporter, dry_run=dry_run, mapper=mapper
    )
    return tuple(op.as_step() for op in operators)
