"""Tests for the provider-neutral statement helpers."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from benefits2ofx.statement import (
    BRT,
    Statement,
    Transaction,
    cents_to_amount,
    local_day,
    make_fitid,
    month_bounds,
    month_name,
    parse_month,
)


class TestParseMonth:
    """Tests for parse_month."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("1", 1),
            ("01", 1),
            ("12", 12),
            ("January", 1),
            ("JANUARY", 1),
            ("february", 2),
            ("sep", 9),
            ("Dec", 12),
            (" may ", 5),
        ],
    )
    def test_valid_months(self, value: str, expected: int) -> None:
        assert parse_month(value) == expected

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["0", "13", "", "janu", "foo", "-1"])
    def test_invalid_months(self, value: str) -> None:
        with pytest.raises(ValueError):
            parse_month(value)

    @pytest.mark.unit
    def test_month_name(self) -> None:
        assert month_name(1) == "January"
        assert month_name(12) == "December"


class TestDates:
    """Tests for month_bounds and local_day."""

    @pytest.mark.unit
    def test_month_bounds(self) -> None:
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
        assert month_bounds(2023, 12) == (date(2023, 12, 1), date(2023, 12, 31))

    @pytest.mark.unit
    def test_local_day_moves_early_utc_hours_to_previous_day(self) -> None:
        moment = datetime(2024, 3, 1, 2, 30, tzinfo=timezone.utc)

        assert local_day(moment) == datetime(2024, 2, 29, tzinfo=BRT)

    @pytest.mark.unit
    def test_local_day_keeps_daytime_utc_hours(self) -> None:
        moment = datetime(2024, 3, 1, 15, 0, tzinfo=timezone.utc)

        assert local_day(moment) == datetime(2024, 3, 1, tzinfo=BRT)

    @pytest.mark.unit
    def test_local_day_treats_naive_datetimes_as_utc(self) -> None:
        assert local_day(datetime(2024, 3, 1, 1, 0)) == datetime(2024, 2, 29, tzinfo=BRT)


class TestAmounts:
    """Tests for cents_to_amount and Statement.balance."""

    @pytest.mark.unit
    def test_cents_to_amount(self) -> None:
        assert cents_to_amount(1234) == Decimal("12.34")
        assert cents_to_amount(5) == Decimal("0.05")
        assert cents_to_amount(1234, negative=True) == Decimal("-12.34")

    @pytest.mark.unit
    def test_balance_sums_transactions(self) -> None:
        day = datetime(2024, 1, 1, tzinfo=BRT)
        statement = Statement(
            institution="Caju",
            account_id="acct",
            start=day,
            end=day,
            transactions=[
                Transaction("a", day, Decimal("100.00"), "CREDIT", "deposit"),
                Transaction("b", day, Decimal("-12.34"), "DEBIT", "coffee"),
            ],
        )

        assert statement.balance == Decimal("87.66")

    @pytest.mark.unit
    def test_empty_statement_balance_is_zero(self) -> None:
        day = datetime(2024, 1, 1, tzinfo=BRT)
        statement = Statement("Flash", "acct", day, day)

        assert statement.balance == Decimal("0.00")


class TestMakeFitid:
    """Tests for make_fitid."""

    @pytest.mark.unit
    def test_same_fields_give_same_id(self) -> None:
        assert make_fitid("Caju", "2024-01-01", "-1.00") == make_fitid(
            "Caju", "2024-01-01", "-1.00"
        )

    @pytest.mark.unit
    def test_different_fields_give_different_ids(self) -> None:
        assert make_fitid("Caju", "a") != make_fitid("Caju", "b")

    @pytest.mark.unit
    def test_length(self) -> None:
        assert len(make_fitid("x")) == 16
