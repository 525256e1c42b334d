"""Service unit scanner.

Reports which units of a fixed allow-list are currently active.
"""

import logging
from collections.abc import Iterator

from cryptdown.scanners.base import Scanner
from cryptdown.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)


class ServiceScanner(Scanner):
    """Scanner for active systemd units.

    A single ``systemctl is-active`` call prints one state line per unit,
    in argument order.
    """

    def __init__(self, units: list[str]) -> None:
        """Initialize the scanner.

        Args:
            units: Unit names to check.
        """
        self._units = list(units)

    @property
    def resource(self) -> str:
        return "services"

    def is_available(self) -> bool:
        """Check if systemctl is available."""
        return command_exists("systemctl")

    def scan(self) -> Iterator[str]:
        """Yield the allow-listed units that are active."""
        if not self._units:
            return

        # Non-zero exit just means at least one unit is inactive
        result = run_command(["systemctl", "is-active", *self._units], timeout=15.0)
        states = result.stdout.splitlines()
        if len(states) != len(self._units):
            logger.debug(
                "systemctl is-active returned %d states for %d units",
                len(states),
                len(self._units),
            )

        for unit, state in zip(self._units, states, strict=False):
            if state.strip() == "active":
                yield unit
