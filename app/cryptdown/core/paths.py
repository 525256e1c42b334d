"""Path management for cryptdown.

Configuration follows the XDG Base Directory Specification. The
compensation marker lives in a runtime-only location (tmpfs) so it can
never survive a reboot.

Defaults:
- Config: ~/.config/cryptdown/
- Runtime: /run/cryptdown/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "cryptdown"

# Runtime directory used when CRYPTDOWN_RUNTIME_DIR is not set
DEFAULT_RUNTIME_DIR = Path("/run") / APP_NAME

MARKER_FILENAME = "network-down.json"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/cryptdown/ (or XDG_CONFIG_HOME/cryptdown/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_config_path() -> Path:
    """Get the default teardown configuration file path.

    Returns:
        Path to ~/.config/cryptdown/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_runtime_dir() -> Path:
    """Get the runtime directory holding transient state.

    Returns:
        CRYPTDOWN_RUNTIME_DIR if set, otherwise /run/cryptdown.
    """
    override = os.environ.get("CRYPTDOWN_RUNTIME_DIR")
    if override:
        return Path(override)
    return DEFAULT_RUNTIME_DIR


def get_marker_path() -> Path:
    """Get the compensation marker file path.

    Returns:
        Path to /run/cryptdown/network-down.json.
    """
    return get_runtime_dir() / MARKER_FILENAME

