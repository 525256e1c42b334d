"""Compensation marker.

A small JSON file written just before networking is taken down and
removed once networking is restored or teardown completes. Its
presence means "compensation is owed". It lives under a runtime-only
directory so a reboot always clears it.
"""

import logging
import os
from datetime import UTC, datetime
from pathlib import Path
from tempfile import NamedTemporaryFile

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cryptdown.core.paths import get_marker_path

logger = logging.getLogger(__name__)


class MarkerState(BaseModel):
    """What the compensator needs to undo network teardown.

    Attributes:
        backend: Name of the network backend that took networking down.
        interfaces: Interfaces that were up before teardown.
        created: When the marker was written.
    """

    model_config = ConfigDict(extra="ignore")

    backend: str
    interfaces: list[str] = Field(default_factory=list)
    created: datetime = Field(default_factory=lambda: datetime.now(UTC))


class CompensationMarker:
    """Process-wide marker file recording an outstanding network restore.

    Attributes:
        path: Marker file location.
    """

    def __init__(self, path: Path | None = None) -> None:
        """Initialize the marker.

        Args:
            path: Optional override for the marker path.
                  Default: /run/cryptdown/network-down.json
        """
        self._path = path if path is not None else get_marker_path()

    @property
    def path(self) -> Path:
        """Marker file location."""
        return self._path

    def exists(self) -> bool:
        """Check if compensation is currently owed."""
        return self._path.exists()

    def write(self, state: MarkerState) -> None:
        """Write the marker atomically.

        Args:
            state: Restore information to persist.

        Raises:
            OSError: If the marker cannot be written.
        """
        self._path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

        tmp_path: Path | None = None
        replaced = False
        try:
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self._path.parent,
                delete=False,
                suffix=".tmp",
            ) as f:
                tmp_path = Path(f.name)
                f.write(state.model_dump_json())
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self._path)
            replaced = True
        finally:
            # Also covers interruptions raised mid-write
            if not replaced and tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
        logger.debug("Wrote compensation marker %s", self._path)

    def read(self) -> MarkerState | None:
        """Read the marker.

        Returns:
            The stored state, None if no marker exists. An unreadable or
            corrupt marker still means compensation is owed, so it yields
            a state with an unknown backend and no interfaces.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except (FileNotFoundError, NotADirectoryError):
            return None
        except OSError as e:
            logger.warning("Cannot read compensation marker %s: %s", self._path, e)
            return MarkerState(backend="unknown")

        try:
            return MarkerState.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Corrupt compensation marker %s: %s", self._path, e)
            return MarkerState(backend="unknown")

    def clear(self) -> bool:
        """Remove the marker.

        Returns:
            True if a marker was removed, False if none existed.
        """
        try:
            self._path.unlink()
        except FileNotFoundError:
            return False
        logger.debug("Removed compensation marker %s", self._path)
        return True
