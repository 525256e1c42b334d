"""Raw link-control backend (iproute2)."""

from cryptdown.network.base import NetworkBackend
from cryptdown.scanners.network import InterfaceScanner
from cryptdown.utils.shell import command_exists


class IpLinkBackend(NetworkBackend):
    """Sets each tracked interface down or up with ``ip link``."""

    @property
    def name(self) -> str:
        return "iplink"

    def is_available(self) -> bool:
        """Check if the ip tool is installed."""
        return command_exists("ip")

    def disable(self, interfaces: tuple[str, ...]) -> list[str]:
        """Set every tracked non-loopback interface down."""
        return self._run_all([["ip", "link", "set", ifc, "down"] for ifc in interfaces])

    def restore(self, interfaces: tuple[str, ...]) -> list[str]:
        """Set every tracked interface back up."""
        return self._run_all([["ip", "link", "set", ifc, "up"] for ifc in interfaces])

    def status(self) -> str:
        """List non-loopback interfaces still up."""
        up = InterfaceScanner().collect()
        if not up:
            return "no interfaces up"
        return f"interfaces up: {', '.join(up)}"
