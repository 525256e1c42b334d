"""Abstract base class for network control backends.

Networking is taken down and restored through the best mechanism the
host offers. The backend is chosen once at startup.
"""

import logging
import subprocess
from abc import ABC, abstractmethod

from cryptdown.utils.shell import run_command

logger = logging.getLogger(__name__)


class NetworkBackend(ABC):
    """Capability interface for disabling and re-enabling networking."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the backend identifier stored in the marker."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this backend can be used on the host."""

    @abstractmethod
    def disable(self, interfaces: tuple[str, ...]) -> list[str]:
        """Take networking down.

        Args:
            interfaces: Interfaces that were up at snapshot time.

        Returns:
            Descriptions of the operations that failed.
        """

    @abstractmethod
    def restore(self, interfaces: tuple[str, ...]) -> list[str]:
        """Bring networking back up.

        Args:
            interfaces: Interfaces recorded when networking went down.

        Returns:
            Descriptions of the operations that failed.
        """

    @abstractmethod
    def status(self) -> str:
        """Describe the current network state for the final audit."""

    @staticmethod
    def _run_all(commands: list[list[str]]) -> list[str]:
        """Run commands in order, collecting failures instead of stopping.

        Args:
            commands: Commands to execute.

        Returns:
            One description per failed command.
        """
        failures: list[str] = []
        for args in commands:
            label = " ".join(args)
            logger.info("Running: %s", label)
            try:
                result = run_command(args, timeout=30.0)
            except (OSError, subprocess.TimeoutExpired) as e:
                logger.warning("%s failed: %s", label, e)
                failures.append(f"{label} ({e})")
                continue
            if not result.success:
                logger.warning("%s failed: %s", label, result.error_text)
                failures.append(f"{label} ({result.error_text})")
        return failures
