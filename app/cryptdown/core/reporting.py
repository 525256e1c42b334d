"""Status stream for teardown progress.

Executors and the sequencer announce what they are doing through a
StatusReporter. The base implementation writes to the log; the CLI
substitutes a console reporter.
"""

import logging
import subprocess
import time

logger = logging.getLogger("cryptdown.status")

# Liveness poll interval while waiting for background work
POLL_INTERVAL_SECONDS = 0.1


class StatusReporter:
    """Receives per-step status lines as they happen."""

    def info(self, message: str) -> None:
        """Report progress."""
        logger.info(message)

    def ok(self, message: str) -> None:
        """Report a success."""
        logger.info(message)

    def warn(self, message: str) -> None:
        """Report an advisory failure or partial failure."""
        logger.warning(message)

    def error(self, message: str) -> None:
        """Report a fatal fault."""
        logger.error(message)

    def wait(self, message: str, process: subprocess.Popen[bytes]) -> int | None:
        """Poll a background process until it exits.

        Args:
            message: What the process is doing.
            process: Running process handle.

        Returns:
            The process exit code.
        """
        logger.debug(message)
        while process.poll() is None:
            time.sleep(POLL_INTERVAL_SECONDS)
        return process.returncode
