"""Control channel carrying operator intents to the gateway owner."""

from __future__ import annotations

import queue
import threading
from enum import StrEnum
from typing import assert_never

from loguru import logger

from foxgate.gateway.core import Gateway


class ControlIntent(StrEnum):
    """Administrative actions the operator console can request."""

    CLEAR_QUEUE = "clear_queue"
    INFO = "info"
    EXIT = "exit"


class ControlChannel:
    """Thread-safe FIFO of intents; the console produces, the serve loop consumes."""

    def __init__(self) -> None:
        self._queue: queue.Queue[ControlIntent] = queue.Queue()

    def post(self, intent: ControlIntent) -> None:
        self._queue.put(intent)

    def next(self, timeout: float | None = None) -> ControlIntent | None:
        """Return the next intent, or None when ``timeout`` elapses first."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None


def apply_intent(gateway: Gateway, intent: ControlIntent) -> bool:
    """Apply one intent; returns False when the process should stop."""
    if intent is ControlIntent.CLEAR_QUEUE:
        dropped = gateway.clear_queue()
        logger.info(f"Clearing task queue ({dropped} tasks dropped)")
        return True
    if intent is ControlIntent.INFO:
        stats = gateway.queue_stats()
        logger.info(f"{stats.queued} tasks queued (backlog {stats.backlog})")
        logger.info(f"{stats.total_enqueued} tasks in total")
        logger.info(f"{stats.total_processed} tasks processed")
        return True
    if intent is ControlIntent.EXIT:
        logger.info("Shutting down gracefully")
        return False
    assert_never(intent)


def run_control_loop(
    channel: ControlChannel,
    gateway: Gateway,
    running: threading.Event,
    *,
    poll_interval: float = 0.5,
) -> None:
    """Apply intents until an EXIT intent arrives or ``running`` is cleared."""
    while running.is_set():
        intent = channel.next(timeout=poll_interval)
        if intent is None:
            continue
        if not apply_intent(gateway, intent):
            running.clear()
