"""Config command implementation.

Shows the effective teardown configuration or writes the defaults.
"""

from pathlib import Path
from typing import Annotated

import tomli_w
import typer

from cryptdown.core.config import ConfigError, TeardownConfig, require_config, save_config
from cryptdown.core.paths import get_config_path
from cryptdown.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or initialize the teardown configuration.",
    no_args_is_help=True,
)


@app.command("show")
def show(
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file.",
        ),
    ] = None,
) -> None:
    """Print the effective configuration as TOML."""
    path = config_path or get_config_path()
    config = require_config(path)
    if not path.exists():
        print_info(f"No config at {path}; showing defaults.")
    console.print(tomli_w.dumps(config.model_dump()), highlight=False, markup=False)


@app.command("init")
def init(
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file.",
        ),
    ] = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite an existing config file.",
        ),
    ] = False,
) -> None:
    """Write the default configuration file."""
    path = config_path or get_config_path()
    if path.exists() and not force:
        print_error(f"Config already exists: {path}")
        print_info("Use --force to overwrite it.")
        raise typer.Exit(code=1)

    try:
        saved = save_config(TeardownConfig(), path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Wrote default config to {saved}")
