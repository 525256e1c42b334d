"""Container runtime scanner.

Lists running containers of a single runtime CLI (podman or docker).
"""

from collections.abc import Iterator

from cryptdown.scanners.base import Scanner
from cryptdown.utils.shell import command_exists, run_command


class ContainerScanner(Scanner):
    """Scanner for running containers of one runtime."""

    def __init__(self, runtime: str) -> None:
        """Initialize the scanner.

        Args:
            runtime: Runtime CLI name (``podman`` or ``docker``).
        """
        self._runtime = runtime

    @property
    def runtime(self) -> str:
        """Runtime CLI this scanner queries."""
        return self._runtime

    @property
    def resource(self) -> str:
        return f"{self._runtime} containers"

    def is_available(self) -> bool:
        """Check if the runtime CLI is installed."""
        return command_exists(self._runtime)

    def scan(self) -> Iterator[str]:
        """Yield IDs of running containers.

        A runtime whose daemon is not running reports an error; that is
        treated as "no containers".
        """
        result = run_command([self._runtime, "ps", "-q"], timeout=30.0)
        if not result.success:
            return
        yield from result.lines()
