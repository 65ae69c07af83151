"""Command-line interface for termrelay.

Provides the main entry point for running single commands or a
line-oriented command loop against the remote execution server, and
for editing the stored terminal preferences.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

SHELL_PROMPT = "termrelay> "


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="termrelay",
        description="Run commands on a remote execution server",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/termrelay.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    exec_parser = subparsers.add_parser("exec", help="Run one command and print its output")
    exec_parser.add_argument(
        "--keep-session", action="store_true",
        help=(
            "Do not end the server session afterwards. Sessions are not saved "
            "between invocations, so the server must expire it on its own"
        ),
    )
    # Everything after the options belongs to the remote command, dashes included
    exec_parser.add_argument("words", nargs=argparse.REMAINDER, help="Command line to run remotely")

    subparsers.add_parser("shell", help="Read commands line by line and run them remotely")
    subparsers.add_parser("config", help="Show the terminal preferences in effect")

    set_parser = subparsers.add_parser("set", help="Change a terminal preference")
    set_parser.add_argument(
        "key", choices=["server-url", "api-key", "font-size", "color-theme"],
    )
    set_parser.add_argument("value")

    reset_parser = subparsers.add_parser("reset", help="Reset font size and color theme")
    reset_parser.add_argument(
        "--all", action="store_true",
        help="Also clear command history",
    )

    args = parser.parse_args(argv)
    if args.command == "exec" and not args.words:
        exec_parser.error("the following arguments are required: words")
    return args


def _build_preferences(settings):
    from termrelay.preferences import PreferenceStore, TerminalPreferences

    store = PreferenceStore(settings.preferences.file)
    return TerminalPreferences(
        store,
        default_url=settings.server.base_url,
        default_api_key=settings.server.api_key.get_secret_value(),
    )


def _build_client(settings, prefs):
    from termrelay.client.http_client import TerminalClient
    from termrelay.identity import DeviceIdentity

    identity = DeviceIdentity(
        device_id=settings.device.device_id,
        id_file=settings.device.id_file,
        persist=settings.device.persist_generated,
    )
    client = TerminalClient(
        prefs.client_config(),
        identity=identity,
        timeout=settings.server.timeout,
    )
    prefs.bind(client)
    return client


def _build_history(settings):
    from termrelay.history import CommandHistory

    history = CommandHistory(settings.history.file, max_entries=settings.history.max_entries)
    history.load()
    return history


async def _exec(settings, args) -> int:
    """Run a single command and print its output."""
    prefs = _build_preferences(settings)
    history = _build_history(settings)
    command = " ".join(args.words)

    async with _build_client(settings, prefs) as client:
        result = await client.run(command)
        history.add(command)
        history.save()
        if not args.keep_session:
            await client.end_session()

    if not result.succeeded:
        print(f"Error: {result.error_message}", file=sys.stderr)
        return 1
    print(result.output, end="" if result.output.endswith("\n") else "\n")
    return 0


async def _read_line() -> str | None:
    try:
        return await asyncio.to_thread(input, SHELL_PROMPT)
    except EOFError:
        return None


async def run_shell(
    client,
    history,
    read_line: Callable[[], Awaitable[str | None]] = _read_line,
) -> None:
    """Read commands until EOF or ``exit`` and run each one remotely.

    Lines are sent verbatim; there is no terminal emulation. A few words
    are handled locally: ``exit``/``quit``, ``history``, ``clear-history``,
    ``status`` and ``end``.
    """
    while True:
        line = await read_line()
        if line is None:
            break
        line = line.strip()
        if not line:
            continue

        if line in ("exit", "quit"):
            break
        if line == "history":
            for index, entry in enumerate(history.entries, start=1):
                print(f"{index:5d}  {entry}")
            continue
        if line == "clear-history":
            history.clear()
            history.save()
            print("Command history cleared.")
            continue
        if line == "status":
            print(f"Session: {client.state.value}")
            continue
        if line == "end":
            await _end_session(client)
            continue

        history.add(line)
        result = await client.run(line)
        if result.succeeded:
            print(result.output, end="" if result.output.endswith("\n") else "\n")
        else:
            print(f"Error: {result.error_message}", file=sys.stderr)

    history.save()
    await _end_session(client)


async def _end_session(client) -> None:
    from termrelay.client.errors import TerminalError

    try:
        await client.end_session()
    except TerminalError as e:
        print(f"Error: {e.message}", file=sys.stderr)


async def _shell(settings) -> None:
    prefs = _build_preferences(settings)
    history = _build_history(settings)
    async with _build_client(settings, prefs) as client:
        await run_shell(client, history)


def _show_config(settings) -> None:
    prefs = _build_preferences(settings)
    print(f"Server URL:  {prefs.server_url}")
    print("API Key:     ••••••••••••")
    print(f"Font Size:   {prefs.font_size}pt")
    print(f"Color Theme: {prefs.color_theme_name}")


def _set_preference(settings, key: str, value: str) -> None:
    prefs = _build_preferences(settings)
    if key == "server-url":
        prefs.server_url = value
    elif key == "api-key":
        prefs.api_key = value
    elif key == "font-size":
        prefs.font_size = int(value)
    elif key == "color-theme":
        from termrelay.preferences import COLOR_THEMES

        names = [name.lower() for name in COLOR_THEMES]
        prefs.color_theme = names.index(value.lower()) if value.lower() in names else int(value)


def _reset(settings, everything: bool) -> None:
    prefs = _build_preferences(settings)
    prefs.reset_terminal_settings()
    print("Terminal settings have been reset to defaults.")
    if everything:
        history = _build_history(settings)
        history.clear()
        history.save()
        print("Command history cleared.")


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the termrelay CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from termrelay.config.settings import load_settings
    from termrelay.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"
    elif args.command == "exec":
        # Keep stderr clean for scripted use
        settings.logging.level = "WARNING"

    setup_logging(settings.logging)

    if args.command == "exec":
        sys.exit(asyncio.run(_exec(settings, args)))

    elif args.command == "shell":
        logger.info("Starting remote shell against %s", settings.server.base_url)
        asyncio.run(_shell(settings))

    elif args.command == "config":
        _show_config(settings)

    elif args.command == "set":
        try:
            _set_preference(settings, args.key, args.value)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(2)

    elif args.command == "reset":
        _reset(settings, args.all)


if __name__ == "__main__":
    main()
