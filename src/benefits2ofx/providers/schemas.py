"""Pydantic schemas for the Caju and Flash API payloads.

Only the fields the export needs are declared; anything else the private APIs
send is ignored so that additions on their side do not break parsing.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        extra="ignore",
        str_strip_whitespace=True,
        populate_by_name=True,
    )


# Caju


class CajuStatus(str, Enum):
    """Caju statement item status."""

    CONFIRMED = "CONFIRMED"
    REFUNDED = "REFUNDED"
    PENDING = "PENDING"


class CajuLoginResponse(BaseSchema):
    """Response of the bearer token refresh endpoint."""

    bearer_token: str = Field(..., alias="bearerToken")


class CajuItemData(BaseSchema):
    """Merchant details attached to a statement item."""

    merchant_name: str | None = Field(None, alias="merchantName")
    operation_type: str | None = Field(None, alias="operationType")


class CajuStatementItem(BaseSchema):
    """A single Caju statement entry. Amounts are integer cents."""

    id: str | None = None
    action: str | None = None
    amount: int | None = None
    status: str | None = None
    created_at: datetime = Field(..., alias="createdAt")
    data: CajuItemData | None = None
    normalized_name: str | None = Field(None, alias="normalizedName")


class CajuStatementEntry(BaseSchema):
    """Statement item wrapped with its pagination cursor."""

    cursor: str | None = None
    item: CajuStatementItem


class CajuStatementResponse(BaseSchema):
    """One page of the Caju statement endpoint."""

    has_next: bool = Field(..., alias="hasNext")
    items: list[CajuStatementEntry] = Field(default_factory=list)


# Flash authentication (AWS Cognito and the Flash web auth service)


class CognitoInitiateAuthResponse(BaseSchema):
    """Cognito InitiateAuth reply carrying the MFA challenge session."""

    challenge_name: str | None = Field(None, alias="ChallengeName")
    session: str = Field(..., alias="Session")


class CognitoAuthenticationResult(BaseSchema):
    """Tokens issued by Cognito once the challenge is answered."""

    access_token: str = Field(..., alias="AccessToken")
    expires_in: int | None = Field(None, alias="ExpiresIn")
    token_type: str | None = Field(None, alias="TokenType")
    refresh_token: str | None = Field(None, alias="RefreshToken")
    id_token: str | None = Field(None, alias="IdToken")


class CognitoChallengeResponse(BaseSchema):
    """Cognito RespondToAuthChallenge reply."""

    authentication_result: CognitoAuthenticationResult = Field(
        ..., alias="AuthenticationResult"
    )


class FlashEmployeeToken(BaseSchema):
    """Token used by the Flash corporate card API."""

    token: str


class FlashEmployeeResult(BaseSchema):
    data: FlashEmployeeToken


class FlashSignInEmployeeResponse(BaseSchema):
    """Reply of the ``signInEmployee`` tRPC call."""

    result: FlashEmployeeResult


# Flash statement


class FlashTransactionStatus(str, Enum):
    """Flash transaction status. Only completed ones are exported."""

    COMPLETED = "COMPLETED"


class FlashTransactionType(str, Enum):
    """Flash transaction types with a known direction."""

    DEPOSIT = "DEPOSIT"
    OPEN_LOOP_PAYMENT = "OPEN_LOOP_PAYMENT"


class FlashTransaction(BaseSchema):
    """A Flash statement transaction. Amounts are unsigned integer cents."""

    id: str = Field(..., alias="_id")
    date: datetime
    amount: int = Field(..., ge=0)
    description: str = ""
    status: str
    type: str


class FlashStatementMeta(BaseSchema):
    """Pagination metadata of a Flash statement page."""

    current_page: int = Field(0, alias="currentPage")
    total_items: int = Field(0, alias="totalItems")
    total_pages: int = Field(0, alias="totalPages")
    page_size: int = Field(0, alias="pageSize")


class FlashStatementPage(BaseSchema):
    items: list[FlashTransaction] = Field(default_factory=list)
    meta: FlashStatementMeta = Field(default_factory=FlashStatementMeta)


class FlashStatementData(BaseSchema):
    # tRPC wraps payloads under "json"; renamed to avoid shadowing BaseModel.json
    payload: FlashStatementPage = Field(..., alias="json")


class FlashStatementResult(BaseSchema):
    data: FlashStatementData


class FlashStatementResponse(BaseSchema):
    """One element of the tRPC batch reply of ``person.getStatement``."""

    result: FlashStatementResult
