"""Device-mapper scanner.

Lists the nodes under /dev/mapper and looks up their block-device type
so callers can tell encrypted mappings from LVM volumes.
"""

import logging
import subprocess
from collections.abc import Iterator
from pathlib import Path

from cryptdown.scanners.base import Scanner
from cryptdown.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)

MAPPER_DIR = Path("/dev/mapper")

# Control node of the device-mapper driver, never a volume
CONTROL_DEVICE = "control"


class MapperScanner(Scanner):
    """Scanner for device-mapper entries."""

    def __init__(self, mapper_dir: Path = MAPPER_DIR) -> None:
        """Initialize the scanner.

        Args:
            mapper_dir: Directory holding mapper device nodes.
        """
        self._mapper_dir = mapper_dir

    @property
    def resource(self) -> str:
        return "device-mapper"

    def is_available(self) -> bool:
        """Check if the mapper directory exists."""
        return self._mapper_dir.is_dir()

    def scan(self) -> Iterator[str]:
        """Yield mapper entry names (including ``control``), sorted."""
        yield from sorted(entry.name for entry in self._mapper_dir.iterdir())

    def exists(self, name: str) -> bool:
        """Check if a mapper node is still present."""
        return (self._mapper_dir / name).exists()

    def mapping_type(self, name: str) -> str | None:
        """Look up the block-device type of a mapping.

        Args:
            name: Mapper entry name.

        Returns:
            Type reported by lsblk (``crypt``, ``lvm``, ``dm``...), or None
            if it cannot be determined.
        """
        if name == CONTROL_DEVICE or not command_exists("lsblk"):
            return None
        try:
            result = run_command(
                ["lsblk", "-dno", "TYPE", str(self._mapper_dir / name)],
                timeout=15.0,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning("lsblk failed for %s: %s", name, e)
            return None
        if not result.success:
            return None
        lines = result.lines()
        return lines[0] if lines else None
