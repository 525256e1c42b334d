"""Protected resources that teardown must never touch.

The root LUKS mapping, the volume groups layered on top of it and the
``/`` and ``/home`` mount points keep the running system alive. Every
destructive executor consults a :class:`ProtectedResourceSet` before
acting.
"""

import fnmatch
from dataclasses import dataclass

from cryptdown.core.config import TeardownConfig

MAPPER_PREFIX = "/dev/mapper/"


def _normalize_mount(path: str) -> str:
    stripped = path.rstrip("/")
    return stripped or "/"


@dataclass(frozen=True, slots=True)
class ProtectedResourceSet:
    """Immutable per-run set of protected mappings and mounts.

    Attributes:
        root_luks_name: Device-mapper name of the root LUKS volume.
        root_mount_source: Source device of ``/`` as reported at startup.
        lvm_patterns: Glob patterns matching protected LVM mapper names.
        protected_mounts: Mount points that must stay mounted.
    """

    root_luks_name: str = "crypt"
    root_mount_source: str | None = None
    lvm_patterns: tuple[str, ...] = ("arch-vg-*",)
    protected_mounts: tuple[str, ...] = ("/", "/home")

    @classmethod
    def from_config(
        cls,
        config: TeardownConfig,
        root_mount_source: str | None = None,
    ) -> "ProtectedResourceSet":
        """Derive the protected set from configuration.

        Args:
            config: Loaded teardown configuration.
            root_mount_source: Source device of ``/`` (e.g. from findmnt).

        Returns:
            ProtectedResourceSet for this run.
        """
        return cls(
            root_luks_name=config.root_mapping,
            root_mount_source=root_mount_source,
            lvm_patterns=tuple(config.lvm_patterns),
            protected_mounts=tuple(_normalize_mount(m) for m in config.protected_mounts),
        )

    def is_protected_mapping(self, name: str) -> bool:
        """Check if a device-mapper name must never be closed.

        True for the root mapping, any name matching an LVM pattern,
        and the mapping currently backing ``/``.
        """
        if name == self.root_luks_name:
            return True
        if any(fnmatch.fnmatchcase(name, pattern) for pattern in self.lvm_patterns):
            return True
        return self.root_mount_source is not None and self.root_mount_source in (
            name,
            MAPPER_PREFIX + name,
        )

    def is_protected_mount(self, path: str) -> bool:
        """Check if a mount point must never be unmounted.

        Exact comparison (after dropping trailing slashes): ``/home/user``
        is not protected by ``/home``.
        """
        return _normalize_mount(path) in self.protected_mounts


def is_protected_mapping(name: str, protected: ProtectedResourceSet) -> bool:
    """Check if a device-mapper name is protected.

    Args:
        name: Mapper name as listed under /dev/mapper.
        protected: Protected resource set for this run.

    Returns:
        True if the mapping must never be closed, False otherwise.
    """
    return protected.is_protected_mapping(name)


def is_protected_mount(path: str, protected: ProtectedResourceSet) -> bool:
    """Check if a mount point is protected.

    Args:
        path: Absolute mount target.
        protected: Protected resource set for this run.

    Returns:
        True if the mount point must never be unmounted, False otherwise.
    """
    return protected.is_protected_mount(path)
