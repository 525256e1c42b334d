"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path

import pytest
from cryptdown.core.config import TeardownConfig
from cryptdown.core.guards import ProtectedResourceSet
from cryptdown.core.marker import CompensationMarker
from cryptdown.core.reporting import StatusReporter
from cryptdown.network.base import NetworkBackend


class FakeBackend(NetworkBackend):
    """In-memory network backend recording every call."""

    def __init__(self, name: str = "nmcli", fail_restore: bool = False) -> None:
        self._name = name
        self._fail_restore = fail_restore
        self.calls: list[tuple[str, tuple[str, ...]]] = []
        self.network_up = True

    @property
    def name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        return True

    def disable(self, interfaces: tuple[str, ...]) -> list[str]:
        self.calls.append(("disable", interfaces))
        self.network_up = False
        return []

    def restore(self, interfaces: tuple[str, ...]) -> list[str]:
        self.calls.append(("restore", interfaces))
        if self._fail_restore:
            return ["nmcli networking on (failed)"]
        self.network_up = True
        return []

    def status(self) -> str:
        return "networking enabled" if self.network_up else "networking disabled"


class RecordingReporter(StatusReporter):
    """Status reporter that keeps every message for assertions."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def ok(self, message: str) -> None:
        self.messages.append(("ok", message))

    def warn(self, message: str) -> None:
        self.messages.append(("warn", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def texts(self, level: str) -> list[str]:
        return [text for lvl, text in self.messages if lvl == level]


@pytest.fixture
def config() -> TeardownConfig:
    """Default teardown configuration."""
    return TeardownConfig()


@pytest.fixture
def protected() -> ProtectedResourceSet:
    """Protected set for a host whose root is /dev/mapper/arch-vg-root."""
    return ProtectedResourceSet(
        root_luks_name="crypt",
        root_mount_source="/dev/mapper/arch-vg-root",
        lvm_patterns=("arch-vg-*",),
        protected_mounts=("/", "/home"),
    )


@pytest.fixture
def marker(tmp_path: Path) -> CompensationMarker:
    """Compensation marker inside a temporary runtime directory."""
    return CompensationMarker(tmp_path / "run" / "network-down.json")


@pytest.fixture
def backend() -> FakeBackend:
    """Network backend that succeeds and records calls."""
    return FakeBackend()


@pytest.fixture
def reporter() -> RecordingReporter:
    """Status reporter capturing messages."""
    return RecordingReporter()


@pytest.fixture
def mock_mounts_output() -> str:
    """Sample /proc/self/mounts content."""
    return """/dev/mapper/arch-vg-root / ext4 rw,relatime 0 0
/dev/mapper/arch-vg-home /home ext4 rw,relatime 0 0
proc /proc proc rw,nosuid,nodev,noexec,relatime 0 0
/dev/mapper/extra1 /mnt/usb ext4 rw,relatime 0 0
/dev/sdc1 /mnt/usb/sub vfat rw,relatime 0 0
/dev/sdd1 /mnt2 ext4 rw,relatime 0 0
/dev/sde1 /run/media/user/My\\040Stick vfat rw,relatime 0 0"""


@pytest.fixture
def mock_ip_link_output() -> str:
    """Sample ``ip -o link show`` output."""
    return (
        "1: lo: <LOOPBACK,UP,LOWER_UP> mtu 65536 qdisc noqueue state UNKNOWN mode DEFAULT\\"
        "    link/loopback 00:00:00:00:00:00 brd 00:00:00:00:00:00\n"
        "2: enp3s0: <BROADCAST,MULTICAST,UP,LOWER_UP> mtu 1500 qdisc fq_codel state UP "
        "mode DEFAULT\\"
        "    link/ether aa:bb:cc:dd:ee:ff brd ff:ff:ff:ff:ff:ff\n"
        "3: wlan0: <BROADCAST,MULTICAST> mtu 1500 qdisc noop state DOWN mode DEFAULT\\"
        "    link/ether 11:22:33:44:55:66 brd ff:ff:ff:ff:ff:ff\n"
        "4: veth1a2b@if5: <BROADCAST,MULTICAST,UP,LOWER_UP> mtu 1500 qdisc noqueue state UP\\"
        "    link/ether 66:55:44:33:22:11 brd ff:ff:ff:ff:ff:ff\n"
    )


@pytest.fixture
def failing_backend() -> FakeBackend:
    """Network backend whose restore always fails."""
    return FakeBackend(fail_restore=True)
