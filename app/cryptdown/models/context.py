"""Teardown context snapshot.

The context is collected once before the first step runs. Executors
act only on what it lists and never re-enumerate system state; the only
mutation allowed is appending compensation obligations.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ContainerRef:
    """A running container of a given runtime.

    Attributes:
        runtime: Runtime CLI name (``podman`` or ``docker``).
        container_id: Short container ID as listed by ``ps -q``.
    """

    runtime: str
    container_id: str

    def __str__(self) -> str:
        return f"{self.runtime}:{self.container_id}"


@dataclass(frozen=True, slots=True)
class MapperEntry:
    """A device-mapper node and its block-device type.

    Attributes:
        name: Name under /dev/mapper.
        dm_type: Type reported by lsblk (``crypt``, ``lvm``, ...), None if unknown.
    """

    name: str
    dm_type: str | None = None

    @property
    def is_crypt(self) -> bool:
        """Check if the mapping is backed by disk encryption."""
        return self.dm_type == "crypt"

    @property
    def device_path(self) -> str:
        """Absolute device node path."""
        return f"/dev/mapper/{self.name}"


@dataclass(frozen=True, slots=True)
class MountTree:
    """Mount targets found under one base path.

    Attributes:
        base: Base path that was enumerated.
        targets: Mount targets, deepest first.
    """

    base: str
    targets: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class TeardownContext:
    """Resource snapshot shared by all executors.

    Attributes:
        services: Active units from the service allow-list.
        runtimes: Container runtimes detected on the host.
        containers: Running containers across all detected runtimes.
        agent_socket: SSH agent socket path captured at startup.
        interfaces: Non-loopback interfaces that were up.
        mount_trees: Mount targets per base path, in unmount order.
        mappings: Device-mapper entries (unfiltered).
        swap_devices: Active swap devices.
        zram_devices: zram devices present on the host.
        obligations: Names of steps that owe compensation.
    """

    services: tuple[str, ...] = ()
    runtimes: tuple[str, ...] = ()
    containers: tuple[ContainerRef, ...] = ()
    agent_socket: str | None = None
    interfaces: tuple[str, ...] = ()
    mount_trees: tuple[MountTree, ...] = ()
    mappings: tuple[MapperEntry, ...] = ()
    swap_devices: tuple[str, ...] = ()
    zram_devices: tuple[str, ...] = ()
    obligations: list[str] = field(default_factory=list)

    def add_obligation(self, step_name: str) -> None:
        """Record that a step performed an action requiring compensation."""
        if step_name not in self.obligations:
            self.obligations.append(step_name)

    @property
    def owes_compensation(self) -> bool:
        """Check if any compensable step has run."""
        return bool(self.obligations)
