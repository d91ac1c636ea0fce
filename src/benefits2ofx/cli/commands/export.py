"""Export commands for the benefits2ofx CLI.

Each command logs in to one provider, downloads one month of transactions
and writes them as an OFX document to a file or stdout.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Annotated

import typer
from pydantic import SecretStr

from ...config import Benefits2OfxSettings, get_settings
from ...errors import Benefits2OfxError
from ...ofx import build_ofx
from ...providers import caju, flash
from ...providers.caju import CajuClient
from ...providers.flash import FlashClient
from ...statement import Statement, month_name, parse_month
from ...utils.file import write_output

app = typer.Typer(help="Export a month of transactions to OFX", no_args_is_help=True)
logger = logging.getLogger(__name__)

MonthArgument = Annotated[
    str | None,
    typer.Argument(
        help="Month to export, as a number or an English name. Default: current month",
        show_default=False,
    ),
]
YearArgument = Annotated[
    int | None,
    typer.Argument(help="Year to export. Default: current year", show_default=False),
]
OutputOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="File to write the OFX to. Default: stdout",
        dir_okay=False,
    ),
]


def resolve_period(month: str | None, year: int | None) -> tuple[int, int]:
    """Turn the MONTH and YEAR arguments into a ``(year, month)`` pair.

    Raises:
        typer.BadParameter: If the month cannot be parsed or the year is invalid
    """
    today = date.today()

    if month is None:
        month_number = today.month
    else:
        try:
            month_number = parse_month(month)
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="MONTH") from e

    if year is None:
        year = today.year
    elif not 1900 <= year <= 9999:
        raise typer.BadParameter(f"Year out of range: {year}", param_hint="YEAR")

    return year, month_number


def write_statement(
    statement: Statement,
    settings: Benefits2OfxSettings,
    year: int,
    month: int,
    output: Path | None,
) -> None:
    """Render the statement and write it out."""
    logger.info(
        f"Exporting {len(statement.transactions)} {statement.institution} "
        f"transactions for {month_name(month)}/{year}"
    )
    text = build_ofx(statement, settings.ofx)
    try:
        written = write_output(text, output)
    except OSError as e:
        raise Benefits2OfxError(f"Could not write {output}: {e}") from e
    if written is not None:
        logger.info(f"Wrote ofx for {month_name(month)}/{year} at {written}")


@app.command("caju")
def export_caju(
    month: MonthArgument = None,
    year: YearArgument = None,
    output: OutputOption = None,
) -> None:
    """Export a month of Caju transactions.

    Needs BEARER_TOKEN, REFRESH_TOKEN, USER_ID and EMPLOYEE_ID, which can be
    captured with a MITM proxy while opening the Caju app.
    """
    year, month_number = resolve_period(month, year)

    try:
        settings = get_settings()
        settings.validate_required_credentials("caju")
        config = settings.caju

        client = CajuClient(
            config.base_url, config.user_id or "", config.employee_id or ""
        )
        bearer_token = (
            config.bearer_token.get_secret_value() if config.bearer_token else ""
        )
        refresh_token = (
            config.refresh_token.get_secret_value() if config.refresh_token else ""
        )
        client.login(bearer_token, refresh_token)

        items = client.get_month_statement(year, month_number)
        statement = caju.to_statement(items, client.employee_id)
        write_statement(statement, settings, year, month_number, output)

    except Benefits2OfxError as e:
        logger.error(f"❌ Caju export failed: {e}")
        raise typer.Exit(1) from e


@app.command("flash")
def export_flash(
    month: MonthArgument = None,
    year: YearArgument = None,
    output: OutputOption = None,
    code: Annotated[
        str | None,
        typer.Option(
            "--code",
            "-c",
            help="SMS code for the login. Prompted for when omitted",
        ),
    ] = None,
) -> None:
    """Export a month of Flash transactions.

    Logs in with FLASH_USERNAME and FLASH_PASSWORD and asks for the SMS code,
    unless FLASH_AUTH_OVERRIDE_TOKEN already holds a token.
    """
    year, month_number = resolve_period(month, year)

    try:
        settings = get_settings()
        settings.validate_required_credentials("flash")
        config = settings.flash
        company_id = config.company_id or ""
        employee_id = config.employee_id or ""

        if config.override_token:
            logger.info("Using override token")
            client = FlashClient.with_token(
                config.override_token.get_secret_value(), company_id, employee_id
            )
        else:
            client = FlashClient(
                config.username or "",
                config.password or SecretStr(""),
                company_id,
                employee_id,
            )
            client.initiate_auth()
            if code is None:
                code = typer.prompt("Enter TOTP", err=True)
            client.finish_login(code)

        transactions = client.get_month_statement(year, month_number)
        statement = flash.to_statement(transactions, employee_id)
        write_statement(statement, settings, year, month_number, output)

    except Benefits2OfxError as e:
        logger.error(f"❌ Flash export failed: {e}")
        raise typer.Exit(1) from e
