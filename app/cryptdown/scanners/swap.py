"""Swap and zram scanners."""

from collections.abc import Iterator

from cryptdown.scanners.base import Scanner
from cryptdown.utils.shell import command_exists, run_command

ZRAM_PREFIX = "/dev/zram"


class SwapScanner(Scanner):
    """Scanner for active swap devices (``swapon --show``)."""

    @property
    def resource(self) -> str:
        return "swap"

    def is_available(self) -> bool:
        """Check if swapon is available."""
        return command_exists("swapon")

    def scan(self) -> Iterator[str]:
        """Yield active swap device or file names."""
        result = run_command(["swapon", "--show=NAME", "--noheadings"], timeout=15.0)
        if not result.success:
            return
        yield from result.lines()


class ZramScanner(Scanner):
    """Scanner for zram devices (``zramctl``)."""

    @property
    def resource(self) -> str:
        return "zram"

    def is_available(self) -> bool:
        """Check if zramctl is available."""
        return command_exists("zramctl")

    def scan(self) -> Iterator[str]:
        """Yield zram device paths."""
        result = run_command(["zramctl", "--output", "NAME", "--noheadings"], timeout=15.0)
        if not result.success:
            return
        for name in result.lines():
            if name.startswith(ZRAM_PREFIX):
                yield name
