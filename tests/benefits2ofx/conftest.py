"""Shared pytest fixtures for benefits2ofx tests.

This module isolates every test from the developer's environment (no stray
``.env`` files or credential variables) and provides helpers to fake HTTP
responses without touching the network.
"""

import json
import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests
from pytest_mock import MockerFixture

from benefits2ofx.config import clear_settings_cache, set_current_profile

LEGACY_ENV_VARS = (
    "BASE_URL",
    "BEARER_TOKEN",
    "REFRESH_TOKEN",
    "USER_ID",
    "EMPLOYEE_ID",
    "FLASH_USERNAME",
    "FLASH_PASSWORD",
    "FLASH_COMPANY_ID",
    "FLASH_AUTH_OVERRIDE_TOKEN",
    "LOG_LEVEL",
    "LOG_TO_FILE",
)


@pytest.fixture(autouse=True)
def clean_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Run each test in an empty directory with no credentials set.

    Also clears the settings cache and resets the current profile to 'test'
    before and after the test.
    """
    monkeypatch.chdir(tmp_path)
    for name in LEGACY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    for name in list(os.environ):
        if name.upper().startswith("BENEFITS2OFX_"):
            monkeypatch.delenv(name, raising=False)

    clear_settings_cache()
    set_current_profile("test")

    yield

    clear_settings_cache()
    set_current_profile("test")


@pytest.fixture
def caju_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Complete Caju credentials using the plain variable names."""
    monkeypatch.setenv("BEARER_TOKEN", "old-bearer")
    monkeypatch.setenv("REFRESH_TOKEN", "refresh-me")
    monkeypatch.setenv("USER_ID", "user-1")
    monkeypatch.setenv("EMPLOYEE_ID", "employee-1")


@pytest.fixture
def flash_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Complete Flash credentials using the plain variable names."""
    monkeypatch.setenv("FLASH_USERNAME", "maria@example.com")
    monkeypatch.setenv("FLASH_PASSWORD", "hunter2")
    monkeypatch.setenv("FLASH_COMPANY_ID", "company-1")
    monkeypatch.setenv("EMPLOYEE_ID", "employee-1")


@pytest.fixture
def json_response() -> Callable[..., requests.Response]:
    """Build real ``requests.Response`` objects carrying a JSON body."""

    def _make(payload: Any, status_code: int = 200) -> requests.Response:
        response = requests.Response()
        response.status_code = status_code
        response._content = json.dumps(payload).encode("utf-8")
        response.encoding = "utf-8"
        response.url = "https://api.test/"
        return response

    return _make


@pytest.fixture
def http_session(mocker: MockerFixture) -> requests.Session:
    """A real session whose ``request`` method is a mock.

    Configure ``http_session.request.side_effect`` or ``return_value`` to
    script the replies.
    """
    session = requests.Session()
    mock_request: MagicMock = mocker.patch.object(session, "request")
    assert mock_request is session.request
    return session
