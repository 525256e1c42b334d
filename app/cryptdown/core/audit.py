"""Final read-back after teardown.

Re-queries the system and reports anything that should be gone but is
not: encrypted mappings, mounts under the watched trees and the network
state. It is a tripwire for the user before the machine powers off.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from cryptdown.core.config import TeardownConfig
from cryptdown.core.guards import ProtectedResourceSet
from cryptdown.network import NetworkBackend
from cryptdown.scanners.mapper import CONTROL_DEVICE, MapperScanner
from cryptdown.scanners.mounts import MOUNTS_FILE, MountScanner

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AuditReport:
    """Residual state observed after teardown.

    Attributes:
        residual_mappings: Unprotected encrypted mappings still open.
        residual_mounts: Unprotected mounts still present under watched trees.
        protected_mappings: Protected mappings still open (expected).
        network_status: Network state as reported by the backend.
    """

    residual_mappings: tuple[str, ...] = ()
    residual_mounts: tuple[str, ...] = ()
    protected_mappings: tuple[str, ...] = ()
    network_status: str = "unknown"

    @property
    def clean(self) -> bool:
        """Check if nothing that should be gone is left behind."""
        return not self.residual_mappings and not self.residual_mounts


def run_audit(
    config: TeardownConfig,
    protected: ProtectedResourceSet,
    backend: NetworkBackend,
    *,
    mounts_file: Path = MOUNTS_FILE,
    mapper: MapperScanner | None = None,
) -> AuditReport:
    """Read back mappings, mounts and network state.

    Args:
        config: Teardown configuration.
        protected: Protected resource set.
        backend: Network backend used for the status line.
        mounts_file: Mount table to read.
        mapper: Device-mapper scanner.

    Returns:
        AuditReport describing what is left.
    """
    mapper = mapper or MapperScanner()

    residual_mappings: list[str] = []
    protected_mappings: list[str] = []
    for name in mapper.collect():
        if name == CONTROL_DEVICE:
            continue
        if protected.is_protected_mapping(name):
            protected_mappings.append(name)
        elif mapper.mapping_type(name) == "crypt":
            residual_mappings.append(name)

    residual_mounts: list[str] = []
    for base in config.unmount_bases:
        for target in MountScanner(base, mounts_file).collect():
            if not protected.is_protected_mount(target) and target not in residual_mounts:
                residual_mounts.append(target)

    report = AuditReport(
        residual_mappings=tuple(residual_mappings),
        residual_mounts=tuple(residual_mounts),
        protected_mappings=tuple(protected_mappings),
        network_status=backend.status(),
    )
    logger.debug("Audit: %s", report)
    return report
