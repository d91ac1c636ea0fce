"""Flash login flow.

Flash authenticates through AWS Cognito with an SMS second factor, then
exchanges the Cognito access token for a Flash employee token:

1. ``InitiateAuth`` with username and password returns a challenge session;
2. ``RespondToAuthChallenge`` with the SMS code returns an access token;
3. ``signInEmployee`` turns the access token into the token the corporate
   card API accepts.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum

import requests

from ..http import parse_response, send
from ..schemas import (
    CognitoChallengeResponse,
    CognitoInitiateAuthResponse,
    FlashSignInEmployeeResponse,
)

logger = logging.getLogger(__name__)

AUTH_URL = "https://hros-auth.flashapp.services"
FLASH_WEB_AUTH_URL = "https://flashos-entrance.us.flashapp.services/v1/auth"
FLASH_CLIENT_ID = "4r4ki1jqohppg2dko3uf7rvq13"

# Cognito rejects bad passwords and codes with 400 NotAuthorizedException
COGNITO_AUTH_STATUSES = (400, 401, 403)


class AuthStage(Enum):
    NOT_STARTED = "not_started"
    INITIALIZED = "initialized"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class AuthState:
    """Where a client is in the login flow.

    ``session`` is set once initialized, ``token`` once authenticated.
    """

    stage: AuthStage = AuthStage.NOT_STARTED
    session: str | None = None
    token: str | None = None

    @classmethod
    def initialized(cls, session: str) -> "AuthState":
        return cls(stage=AuthStage.INITIALIZED, session=session)

    @classmethod
    def authenticated(cls, token: str) -> "AuthState":
        return cls(stage=AuthStage.AUTHENTICATED, token=token)


def _cognito_call(
    http: requests.Session, target: str, body: dict[str, object]
) -> requests.Response:
    return send(
        http,
        "POST",
        AUTH_URL,
        headers={
            "X-Amz-Target": f"AWSCognitoIdentityProviderService.{target}",
            "Content-Type": "application/x-amz-json-1.1",
        },
        data=json.dumps(body),
    )


def initiate_auth(http: requests.Session, username: str, password: str) -> str:
    """Start a password login; Flash then sends the SMS code.

    Returns:
        str: The Cognito challenge session
    """
    response = _cognito_call(
        http,
        "InitiateAuth",
        {
            "AuthFlow": "USER_PASSWORD_AUTH",
            "ClientId": FLASH_CLIENT_ID,
            "AuthParameters": {"USERNAME": username, "PASSWORD": password},
            "ClientMetadata": {"preferredMfa": "SMS_MFA"},
        },
    )
    result = parse_response(
        response,
        CognitoInitiateAuthResponse,
        "Flash login",
        auth_statuses=COGNITO_AUTH_STATUSES,
    )
    logger.debug(f"Cognito challenge: {result.challenge_name}")
    return result.session


def respond_to_challenge(
    http: requests.Session, username: str, code: str, session: str
) -> str:
    """Answer the SMS challenge.

    Returns:
        str: The Cognito access token
    """
    response = _cognito_call(
        http,
        "RespondToAuthChallenge",
        {
            "ChallengeName": "SMS_MFA",
            "ChallengeResponses": {"USERNAME": username, "SMS_MFA_CODE": code},
            "ClientId": FLASH_CLIENT_ID,
            "Session": session,
        },
    )
    result = parse_response(
        response,
        CognitoChallengeResponse,
        "Flash second factor",
        auth_statuses=COGNITO_AUTH_STATUSES,
    )
    return result.authentication_result.access_token


def sign_in_employee(
    http: requests.Session, access_token: str, employee_id: str, company_id: str
) -> str:
    """Exchange a Cognito access token for a Flash employee token."""
    response = send(
        http,
        "POST",
        f"{FLASH_WEB_AUTH_URL}/trpc/signInEmployee",
        headers={"Authorization": f"Bearer {access_token}"},
        json={"employeeId": employee_id, "companyId": company_id},
    )
    result = parse_response(
        response, FlashSignInEmployeeResponse, "Flash employee sign-in"
    )
    return result.result.data.token
