"""Network control backends.

NetworkManager is preferred when present; raw link control is the
fallback. The choice is made once per run.
"""

from cryptdown.network.base import NetworkBackend
from cryptdown.network.iplink import IpLinkBackend
from cryptdown.network.nmcli import NmcliBackend

__all__ = ["IpLinkBackend", "NetworkBackend", "NmcliBackend", "get_backend", "select_backend"]


def select_backend() -> NetworkBackend:
    """Pick the best available network backend.

    Returns:
        NmcliBackend if nmcli is installed, otherwise IpLinkBackend.
    """
    nmcli = NmcliBackend()
    if nmcli.is_available():
        return nmcli
    return IpLinkBackend()


def get_backend(name: str) -> NetworkBackend | None:
    """Look up a backend by the name stored in the marker.

    Args:
        name: Backend identifier (``nmcli`` or ``iplink``).

    Returns:
        Backend instance, or None for an unknown name.
    """
    backends: dict[str, type[NetworkBackend]] = {
        "nmcli": NmcliBackend,
        "iplink": IpLinkBackend,
    }
    backend_cls = backends.get(name)
    return backend_cls() if backend_cls is not None else None
