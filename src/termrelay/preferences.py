"""Key-value preference store and the terminal settings kept in it.

The store is the configuration source for the client: ``TerminalPreferences``
reads the server URL and API key from it, and ``bind()`` forwards every
store change to ``TerminalClient.on_configuration_changed``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

import yaml

from termrelay.client.http_client import TerminalClient
from termrelay.config.settings import DEFAULT_API_KEY, DEFAULT_SERVER_URL
from termrelay.domain.models import ClientConfig
from termrelay.history import CommandHistory

logger = logging.getLogger(__name__)

SERVER_URL_KEY = "terminal_server_url"
API_KEY_KEY = "terminal_api_key"
FONT_SIZE_KEY = "terminal_font_size"
COLOR_THEME_KEY = "terminal_color_theme"
SHOW_BUTTON_KEY = "show_terminal_button"

DEFAULT_FONT_SIZE = 14
FONT_SIZES = (10, 12, 14, 16, 18, 20, 24)
COLOR_THEMES = ("Default", "Light", "Dark", "Solarized")

Listener = Callable[[], None]


class PreferenceStore:
    """A string-keyed value store with change listeners.

    When ``path`` is given the values are loaded from that YAML file and
    written back after every change.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self._path = Path(path) if path else None
        self._values: dict[str, Any] = {}
        self._listeners: list[Listener] = []
        if self._path is not None and self._path.exists():
            with open(self._path) as f:
                self._values = yaml.safe_load(f) or {}
            logger.info("Loaded preferences from %s", self._path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value
        self._save()
        self.notify()

    def remove(self, key: str, notify: bool = True) -> None:
        if self._values.pop(key, None) is not None:
            self._save()
        if notify:
            self.notify()

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify(self) -> None:
        """Call every listener, in subscription order."""
        for listener in list(self._listeners):
            listener()

    def _save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w") as f:
            yaml.safe_dump(self._values, f, default_flow_style=False)


class TerminalPreferences:
    """Typed access to the terminal settings held in a PreferenceStore."""

    def __init__(
        self,
        store: PreferenceStore,
        default_url: str = DEFAULT_SERVER_URL,
        default_api_key: str = DEFAULT_API_KEY,
    ) -> None:
        self._store = store
        self._default_url = default_url
        self._default_api_key = default_api_key

    @property
    def store(self) -> PreferenceStore:
        return self._store

    @property
    def server_url(self) -> str:
        return self._store.get(SERVER_URL_KEY) or self._default_url

    @server_url.setter
    def server_url(self, value: str) -> None:
        if not value:
            raise ValueError("Server URL must not be empty")
        self._store.set(SERVER_URL_KEY, value)
        logger.info("Updated terminal server URL")

    @property
    def api_key(self) -> str:
        return self._store.get(API_KEY_KEY) or self._default_api_key

    @api_key.setter
    def api_key(self, value: str) -> None:
        if not value:
            raise ValueError("API key must not be empty")
        self._store.set(API_KEY_KEY, value)
        logger.info("Updated terminal API key")

    @property
    def font_size(self) -> int:
        return int(self._store.get(FONT_SIZE_KEY) or DEFAULT_FONT_SIZE)

    @font_size.setter
    def font_size(self, value: int) -> None:
        if value not in FONT_SIZES:
            raise ValueError(f"Unsupported font size {value}, choose one of {FONT_SIZES}")
        self._store.set(FONT_SIZE_KEY, value)
        logger.info("Updated terminal font size to %dpt", value)

    @property
    def color_theme(self) -> int:
        return int(self._store.get(COLOR_THEME_KEY) or 0)

    @color_theme.setter
    def color_theme(self, value: int) -> None:
        if not 0 <= value < len(COLOR_THEMES):
            raise ValueError(f"Unknown color theme index {value}")
        self._store.set(COLOR_THEME_KEY, value)
        logger.info("Updated terminal color theme to %s", COLOR_THEMES[value])

    @property
    def color_theme_name(self) -> str:
        # Out of range indices fall back to the last theme
        return COLOR_THEMES[min(max(self.color_theme, 0), len(COLOR_THEMES) - 1)]

    @property
    def show_terminal_button(self) -> bool:
        return bool(self._store.get(SHOW_BUTTON_KEY, False))

    @show_terminal_button.setter
    def show_terminal_button(self, value: bool) -> None:
        self._store.set(SHOW_BUTTON_KEY, bool(value))
        logger.info("Terminal button %s", "enabled" if value else "disabled")

    def client_config(self) -> ClientConfig:
        return ClientConfig(base_url=self.server_url, api_key=self.api_key)

    def bind(self, client: TerminalClient) -> Listener:
        """Forward store changes to ``client``.

        Returns the installed listener so it can be unsubscribed.
        """
        def listener() -> None:
            client.on_configuration_changed(self.client_config())

        self._store.subscribe(listener)
        return listener

    def reset_terminal_settings(self) -> None:
        """Restore font size and color theme defaults.

        Server settings and command history are left alone.
        """
        self._store.remove(FONT_SIZE_KEY, notify=False)
        self._store.remove(COLOR_THEME_KEY, notify=False)
        self._store.notify()
        logger.info("Terminal settings reset to defaults")

    async def reset_all(self, client: TerminalClient, history: CommandHistory) -> None:
        """Reset settings, clear command history and end the active session."""
        self.reset_terminal_settings()
        history.clear()
        history.save()
        await client.end_session()
        logger.info("Terminal fully reset (settings, history, and session)")
