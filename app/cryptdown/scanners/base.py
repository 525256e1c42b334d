"""Abstract base class for resource scanners.

This module defines the Scanner interface that all resource
enumerators implement. Scanners only read system state; filtering
protected resources is left to the caller.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Iterator

logger = logging.getLogger(__name__)


class Scanner(ABC):
    """Abstract base class for all resource scanners.

    Example:
        >>> scanner = SwapScanner()
        >>> for device in scanner.collect():
        ...     print(device)
    """

    @property
    @abstractmethod
    def resource(self) -> str:
        """Return a short name for the enumerated resource kind."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the queried subsystem exists on this host.

        Returns:
            True if the subsystem can be queried, False otherwise.
        """

    @abstractmethod
    def scan(self) -> Iterator[str]:
        """Yield resource identifiers, unfiltered.

        Raises:
            OSError: If the underlying query cannot be executed.
            subprocess.TimeoutExpired: If the query hangs.
        """

    def collect(self) -> list[str]:
        """Return all identifiers, or an empty list if the subsystem is absent.

        Query failures are logged and treated as "nothing found" so that a
        missing or broken subsystem never blocks teardown.
        """
        if not self.is_available():
            logger.debug("%s: subsystem not available", self.resource)
            return []
        try:
            return list(self.scan())
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning("%s: query failed: %s", self.resource, e)
            return []
