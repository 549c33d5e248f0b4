"""
canpi-config - Command Line Interface

Inspect and change the CANPi configuration from a shell. Built with Typer
for the command line and Rich for output.

Usage:
    $ canpi-config --help
    $ canpi-config show --visibility Edit
    $ canpi-config get start_event_id
    $ canpi-config set start_event_id 2
    $ canpi-config validate static/canpi-config-defn.json
    $ canpi-config sections /home/pi/canpi/canpi.cfg

File locations default to the CANPI_DEFN_FILE / CANPI_CFG_FILE settings.
"""

from __future__ import annotations

import logging

import typer

from canpi_config import __version__
from canpi_config.cli.output import console, err_console

app = typer.Typer(
    name="canpi-config",
    help="CANPi configuration definitions and values",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"canpi-config version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging.",
    ),
) -> None:
    """
    Manage the CANPi configuration.

    Attribute definitions (JSON) are merged with the live value file
    (key=value) to show, check and change the device settings.
    """
    from canpi_config.settings import get_settings

    level = "DEBUG" if verbose else get_settings().LOG_LEVEL
    logging.basicConfig(level=getattr(logging, level), format="%(levelname)s %(name)s: %(message)s")


__all__ = [
    "app",
    "cli",
    "console",
    "err_console",
    "__version__",
]


def cli() -> None:
    """Entry point for the CLI."""
    app()


# Registers the commands on ``app``.
from canpi_config.cli import commands  # noqa: E402,F401
