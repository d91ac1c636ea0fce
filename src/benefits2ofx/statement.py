"""Provider-neutral statement model.

Both providers convert their API payloads into a :class:`Statement`, which is
the only input the OFX writer understands.
"""

import calendar
import hashlib
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

# Brazil has not observed daylight saving time since 2019
BRT = timezone(timedelta(hours=-3), "BRT")

CENT = Decimal("0.01")

OFX_TRNTYPES = frozenset({
    "CREDIT",
    "DEBIT",
    "INT",
    "DIV",
    "FEE",
    "SRVCHG",
    "DEP",
    "ATM",
    "POS",
    "XFER",
    "CHECK",
    "PAYMENT",
    "CASH",
    "DIRECTDEP",
    "DIRECTDEBIT",
    "REPEATPMT",
    "OTHER",
})

_MONTH_NAMES = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)


@dataclass(frozen=True)
class Transaction:
    """A single posted transaction, already signed from the holder's view."""

    fitid: str
    posted: datetime
    amount: Decimal
    trntype: str
    description: str


@dataclass(frozen=True)
class Statement:
    """Transactions of one account over one period."""

    institution: str
    account_id: str
    start: datetime
    end: datetime
    transactions: list[Transaction] = field(default_factory=list)

    @property
    def balance(self) -> Decimal:
        """Sum of every transaction amount in the statement."""
        return sum((t.amount for t in self.transactions), Decimal("0.00")).quantize(
            CENT
        )


def parse_month(value: str) -> int:
    """Parse a month given as a number or an English month name.

    Accepts ``"1"`` to ``"12"``, full names and three-letter abbreviations in
    any letter case (``"January"``, ``"JANUARY"``, ``"jan"``).

    Raises:
        ValueError: If the value is not a month
    """
    text = value.strip().lower()
    if not text:
        raise ValueError("Month cannot be empty")

    if text.isdigit():
        number = int(text)
        if 1 <= number <= 12:
            return number
        raise ValueError(f"Month number out of range: {value}")

    for number, name in enumerate(_MONTH_NAMES, start=1):
        if text == name or (len(text) == 3 and name.startswith(text)):
            return number

    raise ValueError(f"Not a month: {value}")


def month_name(month: int) -> str:
    """English name of a month number."""
    return _MONTH_NAMES[month - 1].capitalize()


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Return the first and last calendar day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def local_day(moment: datetime) -> datetime:
    """Midnight, Brasília time, of the local day ``moment`` falls on.

    Naive datetimes are taken to be UTC, which is how both APIs report them.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    local = moment.astimezone(BRT)
    return datetime(local.year, local.month, local.day, tzinfo=BRT)


def cents_to_amount(cents: int, negative: bool = False) -> Decimal:
    """Convert an integer amount in cents to a two-place ``Decimal``."""
    amount = (Decimal(cents) / 100).quantize(CENT)
    return -amount if negative else amount


def make_fitid(*parts: object) -> str:
    """Derive a stable transaction id from the transaction's own fields.

    Used when the provider does not send an id; the same transaction always
    hashes to the same FITID so re-imports are deduplicated.
    """
    payload = "|".join(str(part) for part in parts)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]
