"""Shared test fixtures for the termrelay test suite.

Provides an in-memory stand-in for the execution server, served to the
client through ``httpx.MockTransport``, plus ready-made configs and
clients wired to it.
"""

from __future__ import annotations

import json

import httpx
import pytest

from termrelay.client.http_client import TerminalClient
from termrelay.domain.models import ClientConfig
from termrelay.identity import DeviceIdentity

TEST_URL = "https://exec.test"
TEST_API_KEY = "test-key"
TEST_DEVICE_ID = "DEVICE-0001"


class StubExecutionServer:
    """Implements the session protocol against an in-memory session table.

    The ``*_response`` attributes replace the normal answer of an
    endpoint when set; ``requests`` records every request received.
    """

    def __init__(self, api_key: str = TEST_API_KEY) -> None:
        self.api_key = api_key
        self.requests: list[httpx.Request] = []
        self.sessions: set[str] = set()
        self.created = 0
        self.create_response: httpx.Response | None = None
        self.validate_response: httpx.Response | None = None
        self.execute_response: httpx.Response | None = None
        self.fail_with: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with
        if request.headers.get("X-API-Key") != self.api_key:
            return httpx.Response(401, json={"error": "Invalid API key"})

        route = (request.method, request.url.path)
        session_id = request.headers.get("X-Session-Id")

        if route == ("POST", "/create-session"):
            if self.create_response is not None:
                return self.create_response
            body = json.loads(request.content)
            self.created += 1
            new_id = f"session-{self.created}"
            self.sessions.add(new_id)
            return httpx.Response(200, json={"sessionId": new_id, "userId": body["userId"]})

        if route == ("GET", "/session"):
            if self.validate_response is not None:
                return self.validate_response
            if session_id in self.sessions:
                return httpx.Response(200, json={"sessionId": session_id})
            return httpx.Response(404, json={"error": "Session not found"})

        if route == ("POST", "/execute-command"):
            if session_id not in self.sessions:
                return httpx.Response(401, json={"error": "Invalid or expired session"})
            if self.execute_response is not None:
                return self.execute_response
            command = json.loads(request.content)["command"]
            output = command[len("echo "):] if command.startswith("echo ") else ""
            return httpx.Response(200, json={"output": output})

        if route == ("DELETE", "/session"):
            self.sessions.discard(session_id)
            return httpx.Response(200, json={"message": "Session ended"})

        return httpx.Response(404, json={"error": "Not found"})

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @property
    def routes(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.requests]


# ---------------------------------------------------------------------------
# Config / Identity Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(base_url=TEST_URL, api_key=TEST_API_KEY)


@pytest.fixture
def identity() -> DeviceIdentity:
    """A DeviceIdentity pinned to a known identifier."""
    return DeviceIdentity(device_id=TEST_DEVICE_ID)


# ---------------------------------------------------------------------------
# Server / Client Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def stub_server() -> StubExecutionServer:
    return StubExecutionServer()


@pytest.fixture
def client(
    client_config: ClientConfig,
    identity: DeviceIdentity,
    stub_server: StubExecutionServer,
) -> TerminalClient:
    """A TerminalClient talking to the stub server."""
    return TerminalClient(
        client_config,
        identity=identity,
        transport=httpx.MockTransport(stub_server.handler),
    )
