"""String-in / string-out adapter over TerminalClient.

For callers that only want text back: failures are rendered as an
``"Error: ..."`` string instead of being raised.
"""

from __future__ import annotations

import logging

from termrelay.client.errors import TerminalError
from termrelay.client.http_client import TerminalClient

logger = logging.getLogger(__name__)


class ShellCommandRunner:
    """Executes shell commands on the backend server and returns the output."""

    def __init__(self, client: TerminalClient) -> None:
        self._client = client

    async def execute_shell_command(self, command: str) -> str:
        logger.info("ShellCommandRunner executing command: %s", command)
        try:
            output = await self._client.execute_command(command)
        except TerminalError as e:
            logger.error("ShellCommandRunner command failed: %s", e)
            return f"Error: {e.message}"
        logger.info("ShellCommandRunner command executed successfully")
        return output
