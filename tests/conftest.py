"""
Pytest configuration and shared fixtures for buddy_oidc_login tests.
"""
import io
import logging
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from buddy_oidc_login.actions import ActionsOutput
from buddy_oidc_login.id_token import BaseIdTokenSource


# Configure logging for tests
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

PROVIDER_ID = "11111111-2222-4333-8444-555555555555"
ISSUED_TOKEN = "aaaaaaaa-bbbb-4ccc-8ddd-eeeeeeeeeeee"
FEDERATED_TOKEN = "jwt-abc"


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeIdTokenSource(BaseIdTokenSource):
    """ID token source returning a fixed JWT."""

    def __init__(self, token: str = FEDERATED_TOKEN, error: Optional[Exception] = None) -> None:
        self.token = token
        self.error = error
        self.audiences: List[Optional[str]] = []

    async def get_id_token(self, audience: Optional[str] = None) -> str:
        self.audiences.append(audience)
        if self.error is not None:
            raise self.error
        return self.token


class ScriptedHandler:
    """
    httpx.MockTransport handler replaying a script of responses.

    Each script entry is either an httpx.Response or an exception to raise.
    The last entry repeats once the script is exhausted.
    """

    def __init__(self, *script) -> None:
        self.script = list(script)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.script)) - 1
        entry = self.script[index]
        if isinstance(entry, Exception):
            raise entry
        return entry

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def recording_sleep():
    """Fixture that provides a delay-recording sleep coroutine."""
    return RecordingSleep()


@pytest.fixture
def fake_id_token_source():
    """Fixture that provides an ID token source returning FEDERATED_TOKEN."""
    return FakeIdTokenSource()


@pytest.fixture
def scripted():
    """Factory fixture: scripted(*responses) -> (handler, transport)."""

    def _factory(*script):
        handler = ScriptedHandler(*script)
        return handler, httpx.MockTransport(handler)

    return _factory


@pytest.fixture
def output_stream():
    """In-memory stream for workflow commands."""
    return io.StringIO()


@pytest.fixture
def output_environ(tmp_path) -> Dict[str, str]:
    """Environment with GITHUB_ENV / GITHUB_OUTPUT pointing at temp files."""
    env_file = tmp_path / "github_env"
    output_file = tmp_path / "github_output"
    env_file.write_text("")
    output_file.write_text("")
    return {"GITHUB_ENV": str(env_file), "GITHUB_OUTPUT": str(output_file)}


@pytest.fixture
def actions_output(output_stream, output_environ):
    """ActionsOutput writing to memory and temp files."""
    return ActionsOutput(stream=output_stream, environ=output_environ)


@pytest.fixture
def clean_env(monkeypatch) -> Callable[..., None]:
    """Factory fixture that clears INPUT_* / runner variables and sets the given ones."""
    names = [
        "INPUT_API_KEY",
        "INPUT_PROVIDER_ID",
        "INPUT_AUDIENCE",
        "INPUT_API_URL",
        "INPUT_REGION",
        "INPUT_DEBUG",
        "RUNNER_DEBUG",
        "ACTIONS_ID_TOKEN_REQUEST_URL",
        "ACTIONS_ID_TOKEN_REQUEST_TOKEN",
        "GITHUB_ENV",
        "GITHUB_OUTPUT",
    ]

    def _set(**values: str) -> None:
        for name in names:
            monkeypatch.delenv(name, raising=False)
        for name, value in values.items():
            monkeypatch.setenv(name, value)

    return _set
