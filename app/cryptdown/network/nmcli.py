"""NetworkManager backend (nmcli)."""

import subprocess

from cryptdown.network.base import NetworkBackend
from cryptdown.utils.shell import command_exists, run_command


class NmcliBackend(NetworkBackend):
    """Turns radios and networking off and on through NetworkManager."""

    @property
    def name(self) -> str:
        return "nmcli"

    def is_available(self) -> bool:
        """Check if nmcli is installed."""
        return command_exists("nmcli")

    def disable(self, interfaces: tuple[str, ...]) -> list[str]:
        """Switch all radios and networking off.

        NetworkManager tracks its own devices, so ``interfaces`` is unused.
        """
        return self._run_all(
            [
                ["nmcli", "radio", "all", "off"],
                ["nmcli", "networking", "off"],
            ]
        )

    def restore(self, interfaces: tuple[str, ...]) -> list[str]:
        """Switch networking and all radios back on."""
        return self._run_all(
            [
                ["nmcli", "networking", "on"],
                ["nmcli", "radio", "all", "on"],
            ]
        )

    def status(self) -> str:
        """Return ``nmcli networking`` output (enabled/disabled)."""
        try:
            result = run_command(["nmcli", "networking"], timeout=15.0)
        except (OSError, subprocess.TimeoutExpired) as e:
            return f"unknown ({e})"
        if not result.success:
            return f"unknown ({result.error_text})"
        return f"networking {result.stdout.strip()}"
