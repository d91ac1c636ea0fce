"""Caju API client.

Caju has no public API. The endpoints below are the ones the mobile app
calls; the bearer and refresh tokens have to be captured from it once, after
which :meth:`CajuClient.login` trades them for a fresh bearer token.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date

import requests

from ..errors import EmptyStatementError, ProviderResponseError
from ..statement import (
    OFX_TRNTYPES,
    Statement,
    Transaction,
    cents_to_amount,
    local_day,
    make_fitid,
    month_bounds,
)
from .http import new_session, parse_response, send
from .schemas import (
    CajuLoginResponse,
    CajuStatementItem,
    CajuStatementResponse,
    CajuStatus,
)

logger = logging.getLogger(__name__)

INSTITUTION = "Caju"
PAGE_SIZE = 20
DEPOSIT_DESCRIPTION = "Depósito em conta"


@dataclass(frozen=True)
class StatementQuery:
    """Query parameters of the Caju statement endpoint."""

    limit: int = 2
    cursor: str | None = None
    start_date: date | None = None
    end_date: date | None = None

    def with_cursor(self, cursor: str | None) -> "StatementQuery":
        return replace(self, cursor=cursor)

    def with_date_range(self, date_range: tuple[date, date] | None) -> "StatementQuery":
        if date_range is None:
            return replace(self, start_date=None, end_date=None)
        start_date, end_date = date_range
        return replace(self, start_date=start_date, end_date=end_date)

    def with_limit(self, limit: int) -> "StatementQuery":
        return replace(self, limit=limit)

    def params(self) -> list[tuple[str, str]]:
        """Render the query string; absent values are sent empty."""
        return [
            ("limit", str(self.limit)),
            ("cursor", self.cursor or ""),
            ("order", "DESC"),
            ("start_date", self.start_date.isoformat() if self.start_date else ""),
            ("end_date", self.end_date.isoformat() if self.end_date else ""),
        ]


class CajuClient:
    """Client for the Caju statement API."""

    def __init__(
        self,
        base_url: str,
        user_id: str,
        employee_id: str,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_id = user_id
        self.employee_id = employee_id
        self.session = session or new_session()

    def login(self, bearer_token: str, refresh_token: str) -> CajuLoginResponse:
        """Exchange an existing bearer token and a refresh token for a new one.

        The new token becomes the default ``Authorization`` header of every
        later request.
        """
        response = send(
            self.session,
            "POST",
            f"{self.base_url}/v1/user/{self.user_id}/bearer_token",
            headers={"Authorization": f"Bearer {bearer_token}"},
            json={"refreshToken": refresh_token},
        )
        login = parse_response(response, CajuLoginResponse, "Caju login")

        self.session.headers["Authorization"] = f"Bearer {login.bearer_token}"
        logger.info("Logged in to Caju")
        return login

    def get_statement(self, query: StatementQuery) -> CajuStatementResponse:
        """Fetch a single statement page."""
        response = send(
            self.session,
            "GET",
            f"{self.base_url}/v1/employee/{self.employee_id}/statement",
            params=query.params(),
        )
        return parse_response(response, CajuStatementResponse, "Caju statement")

    def get_month_statement(self, year: int, month: int) -> list[CajuStatementItem]:
        """Fetch every statement item of a month, following the page cursors."""
        query = (
            StatementQuery()
            .with_date_range(month_bounds(year, month))
            .with_limit(PAGE_SIZE)
        )

        items: list[CajuStatementItem] = []
        has_next = True
        while has_next:
            page = self.get_statement(query)
            if not page.items:
                break

            items.extend(entry.item for entry in page.items)
            logger.debug(f"Fetched {len(items)} Caju statement items so far")

            has_next = page.has_next
            next_cursor = page.items[-1].cursor
            if has_next and (next_cursor is None or next_cursor == query.cursor):
                raise ProviderResponseError(
                    "Caju pagination did not advance",
                    body=page.model_dump_json(by_alias=True),
                )
            query = query.with_cursor(next_cursor)

        logger.info(f"Fetched {len(items)} Caju statement items for {month:02d}/{year}")
        return items


def _description(item: CajuStatementItem) -> str:
    if item.data and item.data.merchant_name:
        return item.data.merchant_name
    if item.action == "CREDIT":
        return DEPOSIT_DESCRIPTION
    return "unknown"


def to_transaction(item: CajuStatementItem) -> Transaction:
    """Map a confirmed Caju statement item to a transaction."""
    action = item.action or "DEBIT"
    amount = cents_to_amount(item.amount or 0, negative=action == "DEBIT")
    description = _description(item)
    fitid = item.id or make_fitid(
        INSTITUTION, item.created_at.isoformat(), amount, description
    )

    return Transaction(
        fitid=fitid,
        posted=local_day(item.created_at),
        amount=amount,
        trntype=action if action in OFX_TRNTYPES else "OTHER",
        description=description,
    )


def to_statement(items: list[CajuStatementItem], account_id: str) -> Statement:
    """Convert Caju statement items into a statement.

    Only confirmed items become transactions; pending and refunded ones are
    still used to size the statement period.

    Raises:
        EmptyStatementError: If there are no items at all
    """
    if not items:
        raise EmptyStatementError()

    days = [local_day(item.created_at) for item in items]
    transactions = [
        to_transaction(item) for item in items if item.status == CajuStatus.CONFIRMED
    ]

    return Statement(
        institution=INSTITUTION,
        account_id=account_id,
        start=min(days),
        end=max(days),
        transactions=transactions,
    )
