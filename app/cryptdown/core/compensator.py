"""Network restoration after an interrupted teardown.

The compensator is the only rollback action: it reverses network-down.
It runs inside abort handling, so it never raises.
"""

import logging

from cryptdown.core.marker import CompensationMarker
from cryptdown.core.reporting import StatusReporter
from cryptdown.network import NetworkBackend, get_backend

logger = logging.getLogger(__name__)


class Compensator:
    """Re-enables networking when the compensation marker says it is owed.

    Attributes:
        marker: Compensation marker consulted on every call.
    """

    def __init__(
        self,
        marker: CompensationMarker,
        default_backend: NetworkBackend,
        reporter: StatusReporter | None = None,
    ) -> None:
        """Initialize the compensator.

        Args:
            marker: Compensation marker.
            default_backend: Backend selected at startup. Used when the
                marker names it, or names no known backend.
            reporter: Status stream for user-visible messages.
        """
        self._marker = marker
        self._default_backend = default_backend
        self._reporter = reporter or StatusReporter()

    @property
    def marker(self) -> CompensationMarker:
        """Compensation marker consulted on every call."""
        return self._marker

    def restore_if_needed(self) -> bool:
        """Restore networking if a marker is present, then remove the marker.

        Safe to call repeatedly. The marker is kept when restoration
        fails, so a later ``cryptdown restore`` can retry.

        Returns:
            True if networking was restored by this call, False otherwise.
        """
        try:
            state = self._marker.read()
            if state is None:
                logger.debug("No compensation marker; nothing to restore")
                return False

            backend = self._backend_for(state.backend)
            self._reporter.info(f"Restoring networking ({backend.name})…")
            failures = backend.restore(tuple(state.interfaces))
            if failures:
                for failure in failures:
                    self._reporter.warn(f"Network restore step failed: {failure}")
                self._reporter.warn(
                    f"Networking may still be down; marker kept at {self._marker.path}"
                )
                return False

            self._marker.clear()
            self._reporter.ok("Networking restored.")
            return True
        except Exception:
            logger.exception("Network restoration failed")
            self._reporter.error("Network restoration failed; see log for details.")
            return False

    def _backend_for(self, name: str) -> NetworkBackend:
        """Pick the backend that undoes what the named backend did.

        The startup backend wins when it carries the recorded name; a
        fresh one is built only for a marker left by another run.
        """
        if name == self._default_backend.name:
            return self._default_backend
        return get_backend(name) or self._default_backend
