"""Mount table scanner.

Reads the kernel mount table and returns the targets below a base path
ordered so that nested mounts come before their parents.
"""

import logging
import re
import subprocess
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from cryptdown.scanners.base import Scanner
from cryptdown.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)

MOUNTS_FILE = Path("/proc/self/mounts")

# Octal escapes used by the kernel for whitespace in mount fields
_OCTAL_ESCAPE = re.compile(r"\\([0-7]{3})")


@dataclass(frozen=True, slots=True)
class MountEntry:
    """One line of the mount table.

    Attributes:
        source: Mounted device or pseudo-filesystem name.
        target: Absolute mount point.
        fstype: Filesystem type.
    """

    source: str
    target: str
    fstype: str


def _unescape(field: str) -> str:
    return _OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), field)


def parse_mount_table(text: str) -> list[MountEntry]:
    """Parse /proc/self/mounts formatted text.

    Args:
        text: Mount table contents.

    Returns:
        Parsed entries in table order; malformed lines are skipped.
    """
    entries: list[MountEntry] = []
    for line in text.splitlines():
        parts = line.split()
        if len(parts) < 3:
            if line.strip():
                logger.debug("Skipping malformed mount line: %r", line[:100])
            continue
        entries.append(
            MountEntry(
                source=_unescape(parts[0]),
                target=_unescape(parts[1]),
                fstype=parts[2],
            )
        )
    return entries


def is_under(path: str, base: str) -> bool:
    """Check if a path equals base or lies below it, by path segment.

    ``/mnt/usb`` is under ``/mnt``; ``/mnt2`` is not.
    """
    base = base.rstrip("/") or "/"
    if base == "/":
        return path.startswith("/")
    return path == base or path.startswith(base + "/")


def mounts_under(base: str, targets: list[str]) -> list[str]:
    """Select targets under base, deepest first.

    Reverse lexicographic order puts every path after all of its own
    descendants, since a parent is a strict prefix of each child.

    Args:
        base: Base path.
        targets: Mount targets to filter.

    Returns:
        Unique matching targets in reverse lexicographic order.
    """
    return sorted({t for t in targets if is_under(t, base)}, reverse=True)


def read_mount_table(mounts_file: Path = MOUNTS_FILE) -> list[MountEntry]:
    """Read and parse the mount table.

    Args:
        mounts_file: Mount table path.

    Returns:
        Parsed entries; empty if the file cannot be read.
    """
    try:
        text = mounts_file.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("Cannot read mount table %s: %s", mounts_file, e)
        return []
    return parse_mount_table(text)


class MountScanner(Scanner):
    """Scanner for mount targets under one base path."""

    def __init__(self, base: str, mounts_file: Path = MOUNTS_FILE) -> None:
        """Initialize the scanner.

        Args:
            base: Base path to enumerate under.
            mounts_file: Mount table path.
        """
        self._base = base
        self._mounts_file = mounts_file

    @property
    def base(self) -> str:
        """Base path this scanner enumerates."""
        return self._base

    @property
    def resource(self) -> str:
        return f"mounts under {self._base}"

    def is_available(self) -> bool:
        """Check if the mount table exists."""
        return self._mounts_file.exists()

    def scan(self) -> Iterator[str]:
        """Yield mount targets under the base, deepest first."""
        targets = [entry.target for entry in read_mount_table(self._mounts_file)]
        yield from mounts_under(self._base, targets)


def is_mounted(target: str, mounts_file: Path = MOUNTS_FILE) -> bool:
    """Check if a path is currently a mount target.

    Args:
        target: Mount point to check.
        mounts_file: Mount table path.
    """
    return any(entry.target == target for entry in read_mount_table(mounts_file))


def find_root_source() -> str | None:
    """Return the source device of ``/`` (``findmnt -no SOURCE /``).

    Returns:
        Source device path, or None if it cannot be determined.
    """
    if not command_exists("findmnt"):
        return None
    try:
        result = run_command(["findmnt", "-no", "SOURCE", "/"], timeout=15.0)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning("findmnt failed: %s", e)
        return None
    lines = result.lines()
    if not result.success or not lines:
        return None
    return lines[0]
