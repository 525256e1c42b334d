"""Console colours.

The bundled ``cryptdown/data/theme.toml`` supplies every colour; a user
``theme.toml`` next to the config file may override any subset of them.
"""

import logging
import re
import tomllib
from functools import lru_cache
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from cryptdown.core.paths import get_config_dir

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}){1,2}")

# Rich style name -> (colour field, style prefix)
STYLES: dict[str, tuple[str, str]] = {
    "text": ("text", ""),
    "muted": ("muted", ""),
    "dim": ("muted", ""),
    "header": ("header", ""),
    "bold_header": ("header", "bold "),
    "border": ("border", ""),
    "accent": ("accent", ""),
    "banner": ("accent", "bold "),
    "success": ("success", ""),
    "warning": ("warning", ""),
    "error": ("error", "bold "),
    "info": ("info", ""),
    "protected": ("protected", ""),
    "target": ("target", ""),
}


class ThemeColors(BaseModel):
    """Hex colours (``#RGB`` or ``#RRGGBB``) for every console role."""

    model_config = ConfigDict(extra="forbid")

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"
    accent: str = "#c678dd"
    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"
    # Resources kept alive vs. resources torn down
    protected: str = "#0e8ac8"
    target: str = "#c1ff62"

    @field_validator("*", mode="before")
    @classmethod
    def check_hex(cls, value: object) -> str:
        if not isinstance(value, str) or not _HEX_COLOR.fullmatch(value.strip()):
            msg = f"invalid hex color {value!r}"
            raise ValueError(msg)
        return value.strip()


def get_user_theme_path() -> Path:
    """Return ``$XDG_CONFIG_HOME/cryptdown/theme.toml``."""
    return get_config_dir() / "theme.toml"


def _read_colors(path: Path) -> dict[str, object]:
    """Return the ``[colors]`` table of a theme file, empty if unusable."""
    try:
        with open(path, "rb") as f:
            colors = tomllib.load(f).get("colors", {})
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return {}

    if not isinstance(colors, dict):
        logger.warning("Ignoring theme file %s: [colors] is not a table", path)
        return {}
    return colors


def load_theme() -> ThemeColors:
    """Merge the user overrides onto the bundled colours.

    An invalid merged theme falls back to the built-in defaults.
    """
    bundled = resources.files("cryptdown.data").joinpath("theme.toml")
    colors = {**_read_colors(Path(str(bundled))), **_read_colors(get_user_theme_path())}
    try:
        return ThemeColors.model_validate(colors)
    except ValidationError as e:
        logger.warning("Invalid theme, using defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the rich Theme from a set of colours (loaded if not given)."""
    colors = colors or load_theme()
    values = colors.model_dump()
    return Theme({name: f"{prefix}{values[field]}" for name, (field, prefix) in STYLES.items()})


@lru_cache(maxsize=1)
def get_theme() -> Theme:
    """Return the process-wide rich Theme."""
    return get_rich_theme()


def reload_theme() -> Theme:
    """Drop the cached theme and load it again."""
    get_theme.cache_clear()
    return get_theme()
