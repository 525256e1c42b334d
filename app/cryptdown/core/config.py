"""Teardown configuration.

Everything that differs between machines (root mapping name, volume
group patterns, watched mount trees, service allow-list) lives in a
TOML file validated by :class:`TeardownConfig`. A missing file means
the built-in defaults apply.
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from cryptdown.core.paths import get_config_path


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the configuration file cannot be parsed."""


class ConfigValidationError(ConfigError):
    """Raised when the configuration content is invalid."""


class TeardownConfig(BaseModel):
    """Environment-specific teardown settings.

    Attributes:
        root_mapping: Device-mapper name of the root LUKS volume.
        lvm_patterns: Glob patterns for LVM mapper names that must survive.
        protected_mounts: Mount points never unmounted by the tree step.
        unmount_trees: Generic base paths unmounted first, in order.
        removable_media_path: Removable-media base path, unmounted last.
        services: Service units stopped if active.
        container_runtimes: Container runtime CLIs to query, in order.
        stop_grace_seconds: Grace period for graceful service/container stop.
        sync_passes: Number of sync calls issued by the flush step.
        drop_caches_path: Kernel knob used to drop page/dentry/inode caches.
        drop_caches_value: Value written to ``drop_caches_path``.
        poweroff_command: Command run after a completed teardown.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    root_mapping: Annotated[str, Field(min_length=1)] = "crypt"
    lvm_patterns: list[str] = Field(default_factory=lambda: ["arch-vg-*"])
    protected_mounts: list[str] = Field(default_factory=lambda: ["/", "/home"])
    unmount_trees: list[str] = Field(default_factory=lambda: ["/mnt", "/media"])
    removable_media_path: str = "/run/media"
    services: list[str] = Field(
        default_factory=lambda: ["libvirtd.service", "virtqemud.service"]
    )
    container_runtimes: list[str] = Field(default_factory=lambda: ["podman", "docker"])
    stop_grace_seconds: Annotated[int, Field(ge=0, le=300)] = 10
    sync_passes: Annotated[int, Field(ge=1, le=10)] = 3
    drop_caches_path: str = "/proc/sys/vm/drop_caches"
    drop_caches_value: str = "3"
    poweroff_command: list[str] = Field(
        default_factory=lambda: ["systemctl", "poweroff", "-i"]
    )

    @field_validator("protected_mounts", "unmount_trees")
    @classmethod
    def validate_absolute(cls, paths: list[str]) -> list[str]:
        """Require absolute paths for mount-related settings."""
        for path in paths:
            if not path.startswith("/"):
                msg = f"path must be absolute: {path!r}"
                raise ValueError(msg)
        return paths

    @field_validator("removable_media_path")
    @classmethod
    def validate_removable_media(cls, path: str) -> str:
        """Require an absolute removable-media path."""
        if not path.startswith("/"):
            msg = f"path must be absolute: {path!r}"
            raise ValueError(msg)
        return path

    @property
    def unmount_bases(self) -> list[str]:
        """Base paths in unmount order: generic trees, then removable media."""
        bases = list(self.unmount_trees)
        if self.removable_media_path not in bases:
            bases.append(self.removable_media_path)
        return bases


def load_config(path: Path | None = None) -> TeardownConfig:
    """Load teardown configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated TeardownConfig. Defaults when the file does not exist.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
        ConfigError: If the file cannot be read.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return TeardownConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        return TeardownConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config content: {e}") from e


def save_config(config: TeardownConfig, path: Path | None = None) -> Path:
    """Save teardown configuration to a TOML file.

    The file is written atomically through a temporary file and
    os.replace().

    Args:
        config: The configuration to save.
        path: Destination path. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(config.model_dump(), f)
        os.replace(tmp_path, config_path)
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def require_config(config_path: Path | None = None) -> TeardownConfig:
    """Load configuration or exit with a helpful error message.

    Args:
        config_path: Optional custom config path.

    Returns:
        Loaded and validated TeardownConfig.

    Raises:
        typer.Exit: If the configuration cannot be loaded.
    """
    import typer

    from cryptdown.utils.formatting import print_error, print_info

    path = config_path or get_config_path()
    try:
        return load_config(path)
    except ConfigError as e:
        print_error(f"Failed to load config: {e}")
        print_info("Run 'cryptdown config init --force' to rewrite the defaults.")
        raise typer.Exit(code=1) from e
