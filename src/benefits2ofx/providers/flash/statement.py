"""Flash statement query and conversion."""

import json
import logging
from datetime import datetime, timedelta, timezone

from ...errors import EmptyStatementError
from ...statement import Statement, Transaction, cents_to_amount, local_day
from ..schemas import FlashTransaction, FlashTransactionStatus, FlashTransactionType

logger = logging.getLogger(__name__)

INSTITUTION = "Flash"
PAGE_SIZE = 100

# Midnight in Brasília is 03:00 UTC
_LOCAL_MIDNIGHT_UTC = timedelta(hours=3)

_TRNTYPES = {
    FlashTransactionType.DEPOSIT: ("CREDIT", False),
    FlashTransactionType.OPEN_LOOP_PAYMENT: ("DEBIT", True),
}


def format_timestamp(moment: datetime) -> str:
    """Format a UTC datetime the way the Flash API expects it."""
    return f"{moment:%Y-%m-%dT%H:%M:%S}.{moment.microsecond // 1000:03d}Z"


def month_range(year: int, month: int) -> tuple[datetime, datetime]:
    """UTC instants covering a whole local month.

    Starts at local midnight of day one and ends one second before local
    midnight of the following month.
    """
    start = datetime(year, month, 1, tzinfo=timezone.utc) + _LOCAL_MIDNIGHT_UTC
    if month == 12:
        following = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        following = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    end = following + _LOCAL_MIDNIGHT_UTC - timedelta(seconds=1)
    return start, end


def statement_query(start: datetime, end: datetime, page: int) -> str:
    """Build the tRPC ``input`` parameter of ``person.getStatement``."""
    return json.dumps({
        "0": {
            "json": {
                "pagination": {"currentPage": page, "pageSize": PAGE_SIZE},
                "filter": {
                    "startDate": format_timestamp(start),
                    "endDate": format_timestamp(end),
                },
            },
            "meta": {
                "values": {
                    "filter.endDate": ["Date"],
                    "filter.startDate": ["Date"],
                }
            },
        }
    })


def to_transaction(transaction: FlashTransaction) -> Transaction | None:
    """Map a Flash transaction, or return None when its type is unknown."""
    try:
        trntype, negative = _TRNTYPES[FlashTransactionType(transaction.type)]
    except ValueError:
        logger.warning(
            f"Skipping Flash transaction {transaction.id} with unknown type {transaction.type}"
        )
        return None

    return Transaction(
        fitid=transaction.id,
        posted=local_day(transaction.date),
        amount=cents_to_amount(transaction.amount, negative=negative),
        trntype=trntype,
        description=transaction.description,
    )


def to_statement(transactions: list[FlashTransaction], account_id: str) -> Statement:
    """Convert Flash transactions into a statement.

    Only completed transactions are exported.

    Raises:
        EmptyStatementError: If there are no transactions at all
    """
    if not transactions:
        raise EmptyStatementError()

    days = [local_day(t.date) for t in transactions]
    converted = [
        to_transaction(t)
        for t in transactions
        if t.status == FlashTransactionStatus.COMPLETED
    ]

    return Statement(
        institution=INSTITUTION,
        account_id=account_id,
        start=min(days),
        end=max(days),
        transactions=[t for t in converted if t is not None],
    )
