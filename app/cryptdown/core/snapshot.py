"""Context collection.

Queries every scanner once, before the first step runs, and freezes
the results into a TeardownContext. Executors never re-enumerate.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from cryptdown.core.config import TeardownConfig
from cryptdown.core.guards import ProtectedResourceSet
from cryptdown.models.context import ContainerRef, MapperEntry, MountTree, TeardownContext
from cryptdown.scanners.containers import ContainerScanner
from cryptdown.scanners.mapper import MapperScanner
from cryptdown.scanners.mounts import MOUNTS_FILE, MountScanner, find_root_source
from cryptdown.scanners.network import InterfaceScanner
from cryptdown.scanners.services import ServiceScanner
from cryptdown.scanners.swap import SwapScanner, ZramScanner

logger = logging.getLogger(__name__)


def collect_protected(config: TeardownConfig) -> ProtectedResourceSet:
    """Build the protected resource set, resolving the root mount source.

    Args:
        config: Teardown configuration.

    Returns:
        ProtectedResourceSet for this run.
    """
    return ProtectedResourceSet.from_config(config, root_mount_source=find_root_source())


def collect_context(
    config: TeardownConfig,
    *,
    mounts_file: Path = MOUNTS_FILE,
    mapper: MapperScanner | None = None,
    environ: Mapping[str, str] | None = None,
) -> TeardownContext:
    """Snapshot every resource the teardown steps act on.

    Args:
        config: Teardown configuration.
        mounts_file: Mount table to read.
        mapper: Device-mapper scanner (default: /dev/mapper).
        environ: Environment to read the agent socket from (default: os.environ).

    Returns:
        Frozen resource snapshot.
    """
    env = environ if environ is not None else os.environ
    mapper = mapper or MapperScanner()

    runtimes: list[str] = []
    containers: list[ContainerRef] = []
    for runtime in config.container_runtimes:
        scanner = ContainerScanner(runtime)
        if not scanner.is_available():
            continue
        runtimes.append(runtime)
        containers.extend(ContainerRef(runtime, cid) for cid in scanner.collect())

    mount_trees = tuple(
        MountTree(base=base, targets=tuple(MountScanner(base, mounts_file).collect()))
        for base in config.unmount_bases
    )

    mappings = tuple(
        MapperEntry(name=name, dm_type=mapper.mapping_type(name)) for name in mapper.collect()
    )

    context = TeardownContext(
        services=tuple(ServiceScanner(config.services).collect()),
        runtimes=tuple(runtimes),
        containers=tuple(containers),
        agent_socket=env.get("SSH_AUTH_SOCK") or None,
        interfaces=tuple(InterfaceScanner().collect()),
        mount_trees=mount_trees,
        mappings=mappings,
        swap_devices=tuple(SwapScanner().collect()),
        zram_devices=tuple(ZramScanner().collect()),
    )
    logger.debug("Collected teardown context: %s", context)
    return context
