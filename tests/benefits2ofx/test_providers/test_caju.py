# ruff: noqa: S101,S106
"""Tests for the Caju client and the Caju to statement mapping."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

import pytest
import requests

from benefits2ofx.errors import (
    AuthenticationError,
    EmptyStatementError,
    ProviderResponseError,
)
from benefits2ofx.providers.caju import (
    PAGE_SIZE,
    CajuClient,
    StatementQuery,
    to_statement,
    to_transaction,
)
from benefits2ofx.providers.schemas import CajuStatementItem
from benefits2ofx.statement import BRT

BASE_URL = "https://caju.test"


def _item(**overrides: Any) -> dict[str, Any]:
    item: dict[str, Any] = {
        "id": "item-1",
        "action": "DEBIT",
        "amount": 1590,
        "status": "CONFIRMED",
        "createdAt": "2024-01-15T14:30:00.000Z",
        "data": {"merchantName": "Padaria Central", "operationType": "PURCHASE"},
    }
    item.update(overrides)
    return item


def _page(items: list[dict[str, Any]], has_next: bool) -> dict[str, Any]:
    return {
        "hasNext": has_next,
        "items": [
            {"cursor": f"cursor-{item['id']}", "item": item} for item in items
        ],
    }


def _parse(item: dict[str, Any]) -> CajuStatementItem:
    return CajuStatementItem.model_validate(item)


@pytest.fixture
def client(http_session: requests.Session) -> CajuClient:
    return CajuClient(BASE_URL, "user-1", "employee-1", session=http_session)


class TestStatementQuery:
    """Tests for the statement query parameters."""

    @pytest.mark.unit
    def test_defaults_send_empty_values(self) -> None:
        assert StatementQuery().params() == [
            ("limit", "2"),
            ("cursor", ""),
            ("order", "DESC"),
            ("start_date", ""),
            ("end_date", ""),
        ]

    @pytest.mark.unit
    def test_builders_return_new_queries(self) -> None:
        base = StatementQuery()
        query = (
            base.with_limit(20)
            .with_cursor("abc")
            .with_date_range((date(2024, 1, 1), date(2024, 1, 31)))
        )

        assert base.limit == 2
        assert dict(query.params()) == {
            "limit": "20",
            "cursor": "abc",
            "order": "DESC",
            "start_date": "2024-01-01",
            "end_date": "2024-01-31",
        }
        assert query.with_date_range(None).start_date is None


class TestCajuLogin:
    """Tests for CajuClient.login."""

    @pytest.mark.unit
    def test_login_refreshes_bearer_token(
        self,
        client: CajuClient,
        http_session: Any,
        json_response: Callable[..., requests.Response],
    ) -> None:
        http_session.request.return_value = json_response({"bearerToken": "fresh"})

        login = client.login("old-bearer", "refresh-me")

        assert login.bearer_token == "fresh"
        assert http_session.headers["Authorization"] == "Bearer fresh"

        call = http_session.request.call_args
        assert call.args == ("POST", f"{BASE_URL}/v1/user/user-1/bearer_token")
        assert call.kwargs["headers"] == {"Authorization": "Bearer old-bearer"}
        assert call.kwargs["json"] == {"refreshToken": "refresh-me"}
        assert call.kwargs["timeout"] > 0

    @pytest.mark.unit
    @pytest.mark.parametrize("status", [401, 403])
    def test_rejected_login_is_an_authentication_error(
        self,
        client: CajuClient,
        http_session: Any,
        json_response: Callable[..., requests.Response],
        status: int,
    ) -> None:
        http_session.request.return_value = json_response(
            {"message": "expired"}, status_code=status
        )

        with pytest.raises(AuthenticationError):
            client.login("old-bearer", "refresh-me")

        assert "Authorization" not in http_session.headers

    @pytest.mark.unit
    def test_unexpected_login_body_keeps_the_raw_response(
        self,
        client: CajuClient,
        http_session: Any,
        json_response: Callable[..., requests.Response],
    ) -> None:
        http_session.request.return_value = json_response({"token": "renamed"})

        with pytest.raises(ProviderResponseError) as exc_info:
            client.login("old-bearer", "refresh-me")

        assert exc_info.value.body == '{"token": "renamed"}'
        assert "Failed to parse Caju login response" in str(exc_info.value)

    @pytest.mark.unit
    def test_transport_failure_is_a_provider_error(
        self, client: CajuClient, http_session: Any
    ) -> None:
        http_session.request.side_effect = requests.ConnectionError("no route")

        with pytest.raises(ProviderResponseError, match="no route"):
            client.login("old-bearer", "refresh-me")


class TestCajuStatement:
    """Tests for statement fetching and pagination."""

    @pytest.mark.unit
    def test_follows_cursor_until_last_page(
        self,
        client: CajuClient,
        http_session: Any,
        json_response: Callable[..., requests.Response],
    ) -> None:
        http_session.request.side_effect = [
            json_response(_page([_item(id="a"), _item(id="b")], has_next=True)),
            json_response(_page([_item(id="c")], has_next=False)),
        ]

        items = client.get_month_statement(2024, 1)

        assert [item.id for item in items] == ["a", "b", "c"]
        assert http_session.request.call_count == 2

        first, second = http_session.request.call_args_list
        assert first.args == ("GET", f"{BASE_URL}/v1/employee/employee-1/statement")
        first_params = dict(first.kwargs["params"])
        assert first_params["limit"] == str(PAGE_SIZE)
        assert first_params["cursor"] == ""
        assert first_params["start_date"] == "2024-01-01"
        assert first_params["end_date"] == "2024-01-31"
        assert dict(second.kwargs["params"])["cursor"] == "cursor-b"

    @pytest.mark.unit
    def test_stops_on_empty_page(
        self,
        client: CajuClient,
        http_session: Any,
        json_response: Callable[..., requests.Response],
    ) -> None:
        http_session.request.return_value = json_response(_page([], has_next=True))

        assert client.get_month_statement(2024, 1) == []
        assert http_session.request.call_count == 1

    @pytest.mark.unit
    def test_missing_cursor_with_more_pages_is_an_error(
        self,
        client: CajuClient,
        http_session: Any,
        json_response: Callable[..., requests.Response],
    ) -> None:
        http_session.request.return_value = json_response(
            {"hasNext": True, "items": [{"cursor": None, "item": _item()}]}
        )

        with pytest.raises(ProviderResponseError, match="did not advance"):
            client.get_month_statement(2024, 1)

        assert http_session.request.call_count == 1

    @pytest.mark.unit
    def test_repeated_cursor_is_an_error(
        self,
        client: CajuClient,
        http_session: Any,
        json_response: Callable[..., requests.Response],
    ) -> None:
        http_session.request.return_value = json_response(
            _page([_item(id="a")], has_next=True)
        )

        with pytest.raises(ProviderResponseError, match="did not advance") as exc_info:
            client.get_month_statement(2024, 1)

        assert http_session.request.call_count == 2
        assert exc_info.value.body is not None
        assert "cursor-a" in exc_info.value.body

    @pytest.mark.unit
    def test_missing_cursor_on_last_page_is_fine(
        self,
        client: CajuClient,
        http_session: Any,
        json_response: Callable[..., requests.Response],
    ) -> None:
        http_session.request.return_value = json_response(
            {"hasNext": False, "items": [{"cursor": None, "item": _item()}]}
        )

        assert [item.id for item in client.get_month_statement(2024, 1)] == ["item-1"]

    @pytest.mark.unit
    def test_server_error_carries_status_and_body(
        self,
        client: CajuClient,
        http_session: Any,
        json_response: Callable[..., requests.Response],
    ) -> None:
        http_session.request.return_value = json_response(
            {"error": "boom"}, status_code=500
        )

        with pytest.raises(ProviderResponseError) as exc_info:
            client.get_month_statement(2024, 1)

        assert exc_info.value.status_code == 500
        assert exc_info.value.body is not None
        assert "boom" in exc_info.value.body
        assert "(HTTP 500)" in str(exc_info.value)


class TestCajuMapping:
    """Tests for converting Caju items to transactions and statements."""

    @pytest.mark.unit
    def test_debit_is_negative_and_named_after_merchant(self) -> None:
        transaction = to_transaction(_parse(_item()))

        assert transaction.fitid == "item-1"
        assert transaction.amount == Decimal("-15.90")
        assert transaction.trntype == "DEBIT"
        assert transaction.description == "Padaria Central"
        assert transaction.posted == datetime(2024, 1, 15, tzinfo=BRT)

    @pytest.mark.unit
    def test_credit_without_merchant_is_a_deposit(self) -> None:
        transaction = to_transaction(
            _parse(_item(action="CREDIT", amount=50000, data=None))
        )

        assert transaction.amount == Decimal("500.00")
        assert transaction.trntype == "CREDIT"
        assert transaction.description == "Depósito em conta"

    @pytest.mark.unit
    def test_debit_without_merchant_is_unknown(self) -> None:
        transaction = to_transaction(_parse(_item(data={})))

        assert transaction.description == "unknown"

    @pytest.mark.unit
    def test_missing_action_defaults_to_debit(self) -> None:
        transaction = to_transaction(_parse(_item(action=None)))

        assert transaction.trntype == "DEBIT"
        assert transaction.amount == Decimal("-15.90")

    @pytest.mark.unit
    def test_unknown_action_becomes_other(self) -> None:
        transaction = to_transaction(_parse(_item(action="CASHBACK", amount=300)))

        assert transaction.trntype == "OTHER"
        assert transaction.amount == Decimal("3.00")

    @pytest.mark.unit
    def test_missing_id_gets_a_stable_fitid(self) -> None:
        first = to_transaction(_parse(_item(id=None)))
        second = to_transaction(_parse(_item(id=None)))
        other = to_transaction(_parse(_item(id=None, amount=1)))

        assert first.fitid == second.fitid
        assert first.fitid != other.fitid
        assert len(first.fitid) == 16

    @pytest.mark.unit
    def test_statement_keeps_only_confirmed_items(self) -> None:
        items = [
            _parse(_item(id="late", createdAt="2024-01-31T20:00:00Z")),
            _parse(_item(id="pending", status="PENDING")),
            _parse(_item(id="refunded", status="REFUNDED")),
            # 01:00 UTC on Jan 2 is still Jan 1 in Brasília
            _parse(_item(id="early", createdAt="2024-01-02T01:00:00Z")),
        ]

        statement = to_statement(items, "employee-1")

        assert statement.institution == "Caju"
        assert statement.account_id == "employee-1"
        assert [t.fitid for t in statement.transactions] == ["late", "early"]
        assert statement.start == datetime(2024, 1, 1, tzinfo=BRT)
        assert statement.end == datetime(2024, 1, 31, tzinfo=BRT)
        assert statement.start <= statement.end

    @pytest.mark.unit
    def test_statement_of_only_pending_items_is_empty_but_valid(self) -> None:
        statement = to_statement(
            [_parse(_item(status="PENDING"))], "employee-1"
        )

        assert statement.transactions == []
        assert statement.start == statement.end

    @pytest.mark.unit
    def test_no_items_is_an_error(self) -> None:
        with pytest.raises(EmptyStatementError, match="No statement to convert"):
            to_statement([], "employee-1")

    @pytest.mark.unit
    def test_created_at_is_parsed_as_utc(self) -> None:
        item = _parse(_item())

        assert item.created_at == datetime(2024, 1, 15, 14, 30, tzinfo=timezone.utc)
