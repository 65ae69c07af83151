"""Session-managed HTTP client for the remote execution server.

The client owns at most one server-issued session. Before every command
it acquires a session: a cached one is validated against the server and
reused, otherwise (or when validation fails) a new one is created. Each
public call performs at most one acquisition and one protocol request;
nothing is retried beyond the single validate-then-recreate fallback.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from termrelay.client.decoding import decode_model
from termrelay.client.errors import (
    InvalidEndpointError,
    NetworkError,
    SessionError,
    TerminalError,
)
from termrelay.domain.models import (
    ClientConfig,
    CommandRequest,
    CommandResponse,
    CommandResult,
    CreateSessionRequest,
    CreateSessionResponse,
    Session,
    SessionState,
)
from termrelay.identity import DeviceIdentity

logger = logging.getLogger(__name__)

CREATE_SESSION_PATH = "/create-session"
SESSION_PATH = "/session"
EXECUTE_COMMAND_PATH = "/execute-command"


class TerminalClient:
    """Relays commands to the execution server inside a managed session.

    Example usage::

        config = ClientConfig(base_url="https://exec.example.com", api_key="k")
        async with TerminalClient(config) as client:
            print(await client.execute_command("uname -a"))
            await client.end_session()

    Results are delivered on whichever task awaits the call. Concurrent
    callers share the cached session; acquisitions are serialized so a
    creation in flight is not duplicated.
    """

    def __init__(
        self,
        config: ClientConfig,
        identity: DeviceIdentity | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._identity = identity or DeviceIdentity()
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._session: Session | None = None
        self._pending: SessionState | None = None
        self._generation = 0
        self._acquire_lock = asyncio.Lock()
        logger.info("TerminalClient initialized with URL: %s", config.base_url)

    @property
    def config(self) -> ClientConfig:
        """Snapshot of the configuration currently in use."""
        return self._config

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def has_active_session(self) -> bool:
        return self._session is not None

    @property
    def state(self) -> SessionState:
        if self._pending is not None:
            return self._pending
        return SessionState.ACTIVE if self._session is not None else SessionState.NO_SESSION

    # -- public operations -------------------------------------------------

    async def execute_command(self, command: str) -> str:
        """Run ``command`` on the server and return its output text.

        Raises:
            TerminalError: Classified failure from acquisition or execution.
        """
        logger.info("Executing terminal command: %s", command)
        try:
            session, config = await self._acquire_session()
        except TerminalError as e:
            logger.error("Failed to create session for command execution: %s", e)
            raise

        body = CommandRequest(command=command).model_dump()
        try:
            response = await self._send(
                "POST", config, EXECUTE_COMMAND_PATH,
                session_id=session.session_id, payload=body,
            )
            result = decode_model(response, CommandResponse)
        except TerminalError as e:
            logger.error("Command execution error: %s", e)
            raise

        logger.info("Command executed successfully")
        return result.output

    async def run(self, command: str) -> CommandResult:
        """Like execute_command(), but report failures as a CommandResult."""
        try:
            output = await self.execute_command(command)
        except TerminalError as e:
            return CommandResult(command=command, error_kind=e.kind, error_message=e.message)
        return CommandResult(command=command, output=output)

    async def end_session(self) -> None:
        """Terminate the cached session on the server and forget it.

        Ending when no session is cached succeeds without a request.
        Any HTTP response counts as ended; only transport failures raise.
        """
        session = self._session
        if session is None:
            logger.info("No active terminal session to end")
            return

        try:
            response = await self._send(
                "DELETE", self._config, SESSION_PATH, session_id=session.session_id,
            )
        except TerminalError as e:
            logger.error("Error ending terminal session: %s", e)
            raise

        if response.is_error:
            logger.warning("Server answered HTTP %d when ending session", response.status_code)
        if self._session is session:
            self._session = None
        logger.info("Terminal session ended")

    def on_configuration_changed(self, new_config: ClientConfig) -> bool:
        """Adopt ``new_config`` and drop the cached session if it differs.

        Returns:
            True if the configuration changed.
        """
        if new_config == self._config:
            return False
        self._config = new_config
        self._generation += 1
        self._session = None
        logger.info("Terminal settings changed, session reset")
        return True

    # -- session acquisition -----------------------------------------------

    async def _acquire_session(self) -> tuple[Session, ClientConfig]:
        async with self._acquire_lock:
            config = self._config
            generation = self._generation
            session = self._session

            if session is None:
                logger.info("Creating new terminal session")
            elif await self._validate_session(session, config):
                logger.info("Using existing terminal session")
                return session, config
            else:
                logger.info("Terminal session expired, creating new one")

            if generation != self._generation:
                config = self._config
                generation = self._generation
            return await self._create_session(config, generation), config

    async def _validate_session(self, session: Session, config: ClientConfig) -> bool:
        """Check the session with the server, clearing it when rejected."""
        self._pending = SessionState.VALIDATING
        try:
            response = await self._send(
                "GET", config, SESSION_PATH, session_id=session.session_id,
            )
        except TerminalError as e:
            logger.error("Error validating terminal session: %s", e)
            self._forget(session)
            return False
        finally:
            self._pending = None

        if response.status_code != 200:
            logger.warning("Terminal session expired (HTTP %d)", response.status_code)
            self._forget(session)
            return False

        logger.debug("Terminal session validated successfully")
        return True

    async def _create_session(self, config: ClientConfig, generation: int) -> Session:
        device_id = self._identity.get()
        body = CreateSessionRequest(user_id=device_id).model_dump(by_alias=True)

        self._pending = SessionState.CREATING
        try:
            response = await self._send("POST", config, CREATE_SESSION_PATH, payload=body)
            created = decode_model(response, CreateSessionResponse)
        except TerminalError as e:
            logger.error("Terminal session creation failed: %s", e)
            raise
        finally:
            self._pending = None

        if generation != self._generation:
            logger.warning("Discarding session created under previous settings")
            raise SessionError("Configuration changed during session creation")

        session = Session(session_id=created.session_id, owner_id=created.user_id or device_id)
        self._session = session
        logger.info("Terminal session created successfully")
        return session

    def _forget(self, session: Session) -> None:
        if self._session is session:
            self._session = None

    # -- transport -----------------------------------------------------------

    async def _send(
        self,
        method: str,
        config: ClientConfig,
        path: str,
        session_id: str | None = None,
        payload: dict | None = None,
    ) -> httpx.Response:
        url = _endpoint(config, path)
        headers = {"X-API-Key": config.api_key}
        if session_id is not None:
            headers["X-Session-Id"] = session_id
        try:
            response = await self._http().request(method, url, headers=headers, json=payload)
        except httpx.RequestError as e:
            raise NetworkError(str(e) or type(e).__name__) from e
        logger.debug("%s %s -> HTTP %d", method, path, response.status_code)
        return response

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._client

    async def aclose(self) -> None:
        """Close the underlying HTTP client. The cached session is kept."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> TerminalClient:
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.aclose()


def _endpoint(config: ClientConfig, path: str) -> httpx.URL:
    """Build the absolute request URL for ``path``."""
    try:
        url = httpx.URL(config.url_for(path))
    except httpx.InvalidURL as e:
        logger.error("Invalid URL for %s: %s", path, e)
        raise InvalidEndpointError(f"Invalid URL for {path}: {e}") from e
    if url.scheme not in ("http", "https") or not url.host:
        logger.error("Invalid URL for %s: %s", path, config.base_url)
        raise InvalidEndpointError(f"Invalid URL for {path}: {config.base_url!r}")
    return url
