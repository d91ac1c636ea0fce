"""Exceptions raised by benefits2ofx."""


class Benefits2OfxError(Exception):
    """Base class for every error the export pipeline raises."""


class ConfigurationError(Benefits2OfxError):
    """Required configuration is missing or invalid."""


class AuthenticationError(Benefits2OfxError):
    """A provider rejected the credentials or the login flow is out of order."""


class ProviderResponseError(Benefits2OfxError):
    """A provider answered with an HTTP error or an unexpected body.

    The raw body is kept on the exception so the failing payload can be
    inspected when the private API changes shape.
    """

    def __init__(
        self, message: str, body: str | None = None, status_code: int | None = None
    ):
        self.body = body
        self.status_code = status_code

        details = message
        if status_code is not None:
            details = f"{details} (HTTP {status_code})"
        if body:
            details = f"{details}.\nResponse: {body[:500]}"
        super().__init__(details)


class EmptyStatementError(Benefits2OfxError):
    """The provider returned no transactions for the requested period."""

    def __init__(self, message: str = "No statement to convert"):
        super().__init__(message)
