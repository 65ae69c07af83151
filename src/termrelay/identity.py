"""Stable per-installation device identifier.

The identifier is sent as the session owner when a session is created.
Resolution order: a configured identifier, then one stored in the id
file, then a freshly generated UUID.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)


class DeviceIdentity:
    """Supplies the identifier used as session owner.

    With ``persist=True`` a generated identifier is kept for the lifetime
    of the instance and written to ``id_file`` when one is configured, so
    every session is owned by the same device. With ``persist=False`` a
    new identifier is generated on every call that finds nothing stored.
    """

    def __init__(
        self,
        device_id: str | None = None,
        id_file: Path | str | None = None,
        persist: bool = True,
    ) -> None:
        self._device_id = device_id or None
        self._id_file = Path(id_file) if id_file else None
        self._persist = persist

    def get(self) -> str:
        if self._device_id:
            return self._device_id

        stored = self._read_stored()
        if stored:
            if self._persist:
                self._device_id = stored
            return stored

        generated = str(uuid.uuid4()).upper()
        if self._persist:
            self._device_id = generated
            self._store(generated)
        else:
            logger.debug("Using unpersisted device identifier")
        return generated

    def _read_stored(self) -> str | None:
        if self._id_file is None or not self._id_file.exists():
            return None
        try:
            return self._id_file.read_text(encoding="utf-8").strip() or None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read device identifier from %s: %s", self._id_file, e)
            return None

    def _store(self, value: str) -> None:
        if self._id_file is None:
            return
        try:
            self._id_file.parent.mkdir(parents=True, exist_ok=True)
            self._id_file.write_text(value + "\n", encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save device identifier to %s: %s", self._id_file, e)
        else:
            logger.info("Saved new device identifier to %s", self._id_file)
