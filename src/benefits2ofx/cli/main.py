"""Main CLI application for benefits2ofx.

This module provides the entry point for the command line, wiring the global
options (profile, verbosity) and the command groups together.
"""

import logging
from dataclasses import replace
from typing import Annotated

import typer

from ..config import PROFILE_PATTERN, get_settings, set_current_profile
from ..errors import ConfigurationError
from ..logging import LoggingConfig, setup_logging
from .commands import config, export

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="benefits2ofx",
    help="Export Caju and Flash benefit card statements to OFX",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    profile: Annotated[
        str,
        typer.Option(
            "--profile",
            "-p",
            help="Profile to use; loads .env.{profile} when it exists. Default: default",
            envvar="BENEFITS2OFX_PROFILE",
        ),
    ] = "default",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose debug logging",
        ),
    ] = False,
) -> None:
    """Global options for benefits2ofx.

    Examples:
      benefits2ofx export caju january -o caju-jan.ofx
      benefits2ofx --profile=work export flash 3 2024 > flash-mar.ofx
    """
    if not PROFILE_PATTERN.match(profile):
        raise typer.BadParameter(
            f"Invalid profile name: {profile}. "
            "Use only alphanumeric characters, dashes, and underscores",
            param_hint="--profile",
        )

    set_current_profile(profile)

    # Fall back to environment-only logging when the settings are broken;
    # the command itself reports the configuration error.
    try:
        log_config = LoggingConfig.from_settings(get_settings(profile).logging)
    except ConfigurationError:
        log_config = replace(LoggingConfig.from_environment(), force_reconfigure=True)

    setup_logging(log_config, cli_mode=True, verbose=verbose)
    logger.debug(f"Using profile: {profile}")


app.add_typer(export.app, name="export", help="Export a month of transactions")
app.add_typer(config.app, name="config", help="Inspect the configuration")


def main() -> None:
    """Entry point for the benefits2ofx CLI application."""
    app()


if __name__ == "__main__":
    main()
