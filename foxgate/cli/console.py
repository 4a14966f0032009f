"""Interactive operator console running beside the HTTP server."""

from __future__ import annotations

import sys
import threading
from pathlib import Path
from typing import Callable

from loguru import logger
from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, InMemoryHistory

from foxgate.gateway.control import ControlChannel, ControlIntent

LineReader = Callable[[], str]

COMMAND_HELP: dict[str, str] = {
    "help": "List available commands",
    "exit": "Shut the gateway down gracefully",
    "clear": "Discard every queued task",
    "info": "Show queue counters",
}

_INTENTS: dict[str, ControlIntent] = {
    "exit": ControlIntent.EXIT,
    "clear": ControlIntent.CLEAR_QUEUE,
    "info": ControlIntent.INFO,
}


def _stdin_reader() -> str:
    line = sys.stdin.readline()
    if not line:
        raise EOFError
    return line


def build_line_reader(history_path: Path | None = None) -> LineReader:
    """Line reader for the console thread.

    Uses prompt_toolkit on a terminal and falls back to plain stdin reads when
    input is piped.
    """
    if not sys.stdin.isatty():
        return _stdin_reader
    history = FileHistory(str(history_path)) if history_path else InMemoryHistory()
    session: PromptSession[str] = PromptSession(history=history)

    def _read() -> str:
        # Signal handlers can only be installed from the main thread.
        return session.prompt("> ", handle_sigint=False)

    return _read


class OperatorConsole:
    """Reads operator commands and posts the matching intents to a channel."""

    def __init__(
        self,
        channel: ControlChannel,
        running: threading.Event,
        *,
        read_line: LineReader | None = None,
    ) -> None:
        self.channel = channel
        self.running = running
        self.read_line = read_line or _stdin_reader
        self._thread: threading.Thread | None = None

    def handle(self, line: str) -> bool:
        """Process one input line; returns False once the console should stop."""
        command = line.strip().lower()
        if not command:
            return True
        if command == "help":
            for name, text in COMMAND_HELP.items():
                logger.info(f"{name:<6} {text}")
            return True
        intent = _INTENTS.get(command)
        if intent is None:
            logger.info("Unrecognized command, try help")
            return True
        self.channel.post(intent)
        return intent is not ControlIntent.EXIT

    def run(self) -> None:
        logger.info("Starting command thread")
        while self.running.is_set():
            try:
                line = self.read_line()
            except (EOFError, KeyboardInterrupt):
                self.channel.post(ControlIntent.EXIT)
                break
            if not self.handle(line):
                break
        logger.info("Stopping command thread")

    def start(self) -> threading.Thread:
        self._thread = threading.Thread(target=self.run, name="foxgate-console", daemon=True)
        self._thread.start()
        return self._thread
