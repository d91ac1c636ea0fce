"""HTTP helpers shared by the provider clients.

Every request goes through :func:`send` and every JSON body through
:func:`parse_response`, so transport failures, HTTP error statuses and
schema mismatches all surface as this package's own exceptions.
"""

import logging
from typing import Any, TypeVar

import requests
from pydantic import BaseModel, TypeAdapter, ValidationError

from ..errors import AuthenticationError, ProviderResponseError

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64; rv:135.0) Gecko/20100101 Firefox/135.0"
)
DEFAULT_TIMEOUT = 30.0

ModelT = TypeVar("ModelT", bound=BaseModel)
T = TypeVar("T")


def new_session(user_agent: str | None = None) -> requests.Session:
    """Create a session with JSON accept headers."""
    session = requests.Session()
    session.headers["Accept"] = "application/json"
    if user_agent:
        session.headers["User-Agent"] = user_agent
    return session


def send(
    session: requests.Session,
    method: str,
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
    **kwargs: Any,
) -> requests.Response:
    """Issue a request, turning transport failures into ProviderResponseError."""
    logger.debug(f"{method} {url.split('?')[0]}")
    try:
        return session.request(method, url, timeout=timeout, **kwargs)
    except requests.RequestException as e:
        raise ProviderResponseError(f"{method} {url} failed: {e}") from e


def check_status(
    response: requests.Response,
    what: str,
    auth_statuses: tuple[int, ...] = (401, 403),
) -> None:
    """Raise if the response carries an HTTP error status.

    Raises:
        AuthenticationError: For statuses in ``auth_statuses``
        ProviderResponseError: For any other 4xx/5xx status
    """
    if response.status_code in auth_statuses:
        raise AuthenticationError(
            f"{what} was rejected (HTTP {response.status_code}). "
            "The credentials may be wrong or expired."
        )
    try:
        response.raise_for_status()
    except requests.HTTPError as e:
        raise ProviderResponseError(
            f"{what} failed", body=response.text, status_code=response.status_code
        ) from e


def parse_response(
    response: requests.Response,
    schema: type[ModelT],
    what: str,
    auth_statuses: tuple[int, ...] = (401, 403),
) -> ModelT:
    """Check the status and validate the JSON body against ``schema``."""
    check_status(response, what, auth_statuses)
    try:
        return schema.model_validate_json(response.text)
    except ValidationError as e:
        raise ProviderResponseError(
            f"Failed to parse {what} response: {e}", body=response.text
        ) from e


def parse_response_as(
    response: requests.Response,
    adapter: TypeAdapter[T],
    what: str,
) -> T:
    """Like :func:`parse_response` for non-model types such as lists."""
    check_status(response, what)
    try:
        return adapter.validate_json(response.text)
    except ValidationError as e:
        raise ProviderResponseError(
            f"Failed to parse {what} response: {e}", body=response.text
        ) from e
