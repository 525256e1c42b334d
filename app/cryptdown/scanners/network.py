"""Network interface scanner."""

from collections.abc import Iterator

from cryptdown.scanners.base import Scanner
from cryptdown.utils.shell import command_exists, run_command

LOOPBACK = "lo"


def parse_up_interfaces(output: str) -> list[str]:
    """Extract non-loopback interfaces in state UP from ``ip -o link show``.

    Args:
        output: Raw one-line-per-link output.

    Returns:
        Interface names in listing order. Peer suffixes (``veth0@if3``)
        are dropped.
    """
    names: list[str] = []
    for line in output.splitlines():
        parts = line.split(": ", 2)
        if len(parts) < 3 or "state UP" not in parts[2]:
            continue
        name = parts[1].split("@", 1)[0].strip()
        if name and name != LOOPBACK:
            names.append(name)
    return names


class InterfaceScanner(Scanner):
    """Scanner for network interfaces that are up."""

    @property
    def resource(self) -> str:
        return "interfaces"

    def is_available(self) -> bool:
        """Check if the ip tool is available."""
        return command_exists("ip")

    def scan(self) -> Iterator[str]:
        """Yield non-loopback interfaces currently up."""
        result = run_command(["ip", "-o", "link", "show"], timeout=15.0)
        if not result.success:
            return
        yield from parse_up_interfaces(result.stdout)
