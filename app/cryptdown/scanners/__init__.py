"""Resource scanners for the teardown snapshot.

This module exports the scanner classes that enumerate system state.
"""

from cryptdown.scanners.base import Scanner
from cryptdown.scanners.containers import ContainerScanner
from cryptdown.scanners.mapper import MapperScanner
from cryptdown.scanners.mounts import MountScanner
from cryptdown.scanners.network import InterfaceScanner
from cryptdown.scanners.services import ServiceScanner
from cryptdown.scanners.swap import SwapScanner, ZramScanner

__all__ = [
    "ContainerScanner",
    "InterfaceScanner",
    "MapperScanner",
    "MountScanner",
    "Scanner",
    "ServiceScanner",
    "SwapScanner",
    "ZramScanner",
]
