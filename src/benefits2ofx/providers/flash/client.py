"""Flash corporate card API client."""

import logging

import requests
from pydantic import SecretStr, TypeAdapter

from ...errors import AuthenticationError
from ..http import BROWSER_USER_AGENT, new_session, parse_response_as, send
from ..schemas import FlashStatementResponse, FlashTransaction
from . import auth as flash_auth
from .auth import AuthStage, AuthState
from .statement import month_range, statement_query

logger = logging.getLogger(__name__)

FLASH_BFF_URL = "https://corporate-card-bff.us.flashapp.services/bff/trpc"

_batch_adapter = TypeAdapter(list[FlashStatementResponse])


class FlashClient:
    """Client for the Flash statement API.

    A client starts unauthenticated; call :meth:`initiate_auth`, wait for the
    SMS code and pass it to :meth:`finish_login`. :meth:`with_token` skips
    all of that when a token is already at hand.
    """

    def __init__(
        self,
        username: str,
        password: SecretStr,
        company_id: str,
        employee_id: str,
        session: requests.Session | None = None,
    ):
        self.username = username
        self.password = password
        self.company_id = company_id
        self.employee_id = employee_id
        self.session = session or new_session(BROWSER_USER_AGENT)
        self.auth = AuthState()

    @classmethod
    def with_token(
        cls,
        token: str,
        company_id: str,
        employee_id: str,
        session: requests.Session | None = None,
    ) -> "FlashClient":
        """Build a client that is already authenticated with ``token``."""
        client = cls("", SecretStr(""), company_id, employee_id, session=session)
        client.auth = AuthState.authenticated(token)
        return client

    @property
    def is_authenticated(self) -> bool:
        return self.auth.stage is AuthStage.AUTHENTICATED

    def initiate_auth(self) -> None:
        """Send username and password; Flash answers by texting a code.

        Does nothing once the login flow has started.
        """
        if self.auth.stage is not AuthStage.NOT_STARTED:
            return

        session = flash_auth.initiate_auth(
            self.session, self.username, self.password.get_secret_value()
        )
        self.auth = AuthState.initialized(session)
        logger.info("Flash login started, waiting for the SMS code")

    def finish_login(self, second_factor: str) -> None:
        """Complete the login with the SMS code.

        Raises:
            AuthenticationError: If :meth:`initiate_auth` was not called first
        """
        if self.auth.stage is AuthStage.AUTHENTICATED:
            return
        if self.auth.stage is AuthStage.NOT_STARTED or self.auth.session is None:
            raise AuthenticationError("auth not started. Call initiate_auth first")

        access_token = flash_auth.respond_to_challenge(
            self.session, self.username, second_factor.strip(), self.auth.session
        )
        token = flash_auth.sign_in_employee(
            self.session, access_token, self.employee_id, self.company_id
        )
        self.auth = AuthState.authenticated(token)
        logger.info("Logged in to Flash")

    def _get_statement_page(
        self, token: str, query: str
    ) -> list[FlashStatementResponse]:
        response = send(
            self.session,
            "GET",
            f"{FLASH_BFF_URL}/person.getStatement",
            params=[("batch", "1"), ("input", query)],
            headers={
                "Authorization": token,
                "x-flash-auth": f"Bearer {token}",
                "company-id": self.company_id,
            },
        )
        return parse_response_as(response, _batch_adapter, "Flash statement")

    def get_month_statement(self, year: int, month: int) -> list[FlashTransaction]:
        """Fetch every transaction of a month across all result pages.

        Raises:
            AuthenticationError: If the client is not authenticated
        """
        if not self.is_authenticated or self.auth.token is None:
            raise AuthenticationError("Not authenticated")

        start, end = month_range(year, month)
        transactions: list[FlashTransaction] = []
        page = 0
        while True:
            batch = self._get_statement_page(
                self.auth.token, statement_query(start, end, page)
            )
            if not batch:
                break

            result = batch[-1].result.data.payload
            transactions.extend(result.items)

            if not result.items or page + 1 >= result.meta.total_pages:
                break
            page += 1

        logger.info(
            f"Fetched {len(transactions)} Flash transactions for {month:02d}/{year}"
        )
        return transactions
