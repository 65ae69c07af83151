"""History of commands sent to the execution server."""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class CommandHistory:
    """Bounded, ordered list of executed commands.

    Blank commands are ignored and a command equal to the previous entry
    is not recorded twice. When ``path`` is set, ``load()`` and ``save()``
    read and write the entries as a JSON list.
    """

    def __init__(self, path: Path | str | None = None, max_entries: int = 500) -> None:
        self._path = Path(path) if path else None
        self._max_entries = max_entries
        self._entries: list[str] = []

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, command: str) -> None:
        command = command.strip()
        if not command:
            return
        if self._entries and self._entries[-1] == command:
            return
        self._entries.append(command)
        if len(self._entries) > self._max_entries:
            del self._entries[: len(self._entries) - self._max_entries]

    def clear(self) -> None:
        self._entries.clear()

    def load(self) -> None:
        if self._path is None or not self._path.exists():
            return
        with open(self._path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            logger.warning("Ignoring malformed history file %s", self._path)
            return
        self._entries = [str(item) for item in data][-self._max_entries:]
        logger.debug("Loaded %d history entries", len(self._entries))

    def save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(self._entries, f, indent=2)
