"""Host details shown before teardown starts."""

import logging
import os
import platform
import socket
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from cryptdown.core.config import TeardownConfig
from cryptdown.scanners.mounts import MOUNTS_FILE, MountEntry, is_under, read_mount_table
from cryptdown.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SystemInfo:
    """Snapshot of host details for the info panel.

    Attributes:
        hostname: Short host name.
        kernel: Kernel release.
        uptime: Human-readable uptime.
        tty: Controlling terminal, "n/a" without one.
        user: Invoking user (SUDO_USER preferred).
        root_source: Source device of ``/``.
        root_mapping_status: ``cryptsetup status`` lines for the root mapping,
            None if the mapping is not active or cryptsetup is missing.
        block_devices: ``lsblk`` listing lines.
        watched_mounts: Mount entries under the watched trees.
    """

    hostname: str
    kernel: str
    uptime: str
    tty: str
    user: str
    root_source: str
    root_mapping_status: tuple[str, ...] | None
    block_devices: tuple[str, ...]
    watched_mounts: tuple[MountEntry, ...]


def _capture(args: list[str]) -> list[str] | None:
    """Run a read-only command; None if unavailable or failing."""
    if not command_exists(args[0]):
        return None
    try:
        result = run_command(args, timeout=15.0)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("%s failed: %s", args[0], e)
        return None
    if not result.success:
        return None
    return [line.rstrip() for line in result.stdout.splitlines() if line.strip()]


def _tty() -> str:
    try:
        return os.ttyname(0)
    except OSError:
        return "n/a"


def gather_system_info(
    config: TeardownConfig,
    *,
    mounts_file: Path = MOUNTS_FILE,
    environ: Mapping[str, str] | None = None,
) -> SystemInfo:
    """Collect the details shown in the info panel.

    Args:
        config: Teardown configuration (root mapping, watched trees).
        mounts_file: Mount table to read.
        environ: Environment for the user lookup (default: os.environ).

    Returns:
        SystemInfo snapshot. Missing tools yield placeholder values.
    """
    env = environ if environ is not None else os.environ

    uptime = _capture(["uptime", "-p"])
    root_source = _capture(["findmnt", "-no", "SOURCE", "/"])
    block_devices = _capture(["lsblk", "-o", "NAME,RM,SIZE,RO,TYPE,MOUNTPOINTS"])
    root_status = _capture(["cryptsetup", "status", config.root_mapping])

    bases = config.unmount_bases
    watched = tuple(
        entry
        for entry in read_mount_table(mounts_file)
        if any(is_under(entry.target, base) for base in bases)
    )

    return SystemInfo(
        hostname=socket.gethostname().split(".", 1)[0] or "localhost",
        kernel=platform.release(),
        uptime=uptime[0] if uptime else "n/a",
        tty=_tty(),
        user=env.get("SUDO_USER") or env.get("USER") or "unknown",
        root_source=root_source[0] if root_source else "unknown",
        root_mapping_status=tuple(root_status) if root_status else None,
        block_devices=tuple(block_devices or ()),
        watched_mounts=watched,
    )
