"""Configuration inspection commands for benefits2ofx."""

import json
import logging

import typer

from ...config import env_file_for_profile, get_current_profile, get_settings
from ...errors import ConfigurationError
from ...logging.config import get_log_config_summary

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="config",
    help="Inspect the configuration",
    no_args_is_help=True,
)


@app.command("show")
def show_config() -> None:
    """Show the effective configuration with secrets masked.

    Example:
        benefits2ofx config show
    """
    profile = get_current_profile()
    try:
        settings = get_settings(profile)
    except ConfigurationError as e:
        logger.error(f"❌ {e}")
        raise typer.Exit(1) from e

    env_file = env_file_for_profile(profile)
    typer.echo(f"Profile: {profile}")
    typer.echo(f"Env file: {env_file} (exists: {env_file.exists()})")
    typer.echo(json.dumps(settings.redacted(), indent=2))

    for provider in ("caju", "flash"):
        missing = settings.missing_credentials(provider)
        if missing:
            typer.echo(f"⚠️  {provider}: missing {', '.join(missing)}")
        else:
            typer.echo(f"✅ {provider}: ready")

    typer.echo(f"Logging: {json.dumps(get_log_config_summary())}")
