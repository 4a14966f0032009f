"""Bounded FIFO mailbox between client producers and the device consumer."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field

from foxgate.gateway.tasks import Task


@dataclass(slots=True)
class MonotonicCounter:
    """Process-lifetime counter that only ever grows."""

    _value: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def add(self, amount: int = 1) -> None:
        if amount <= 0:
            return
        with self._lock:
            self._value += amount

    @property
    def value(self) -> int:
        return self._value


@dataclass(frozen=True, slots=True)
class QueueStats:
    queued: int
    total_enqueued: int
    total_processed: int
    backlog: int


class TaskQueue:
    """FIFO of tasks that rejects new entries once ``backlog`` is reached.

    Structural changes happen under one lock; the counters carry their own
    locks and are bumped after the queue lock is released.
    """

    def __init__(self, backlog: int) -> None:
        backlog = int(backlog)
        if backlog < 1:
            raise ValueError(f"backlog must be at least 1, got {backlog}")
        self.backlog = backlog
        self._tasks: deque[Task] = deque()
        self._lock = threading.Lock()
        self.total_enqueued = MonotonicCounter()
        self.total_processed = MonotonicCounter()

    def enqueue(self, task: Task) -> bool:
        with self._lock:
            if len(self._tasks) >= self.backlog:
                return False
            self._tasks.append(task)
        self.total_enqueued.add()
        return True

    def drain_all(self) -> list[Task]:
        """Remove and return everything queued at call time, oldest first."""
        with self._lock:
            count = len(self._tasks)
            drained = [self._tasks.popleft() for _ in range(count)]
        self.total_processed.add(len(drained))
        return drained

    def clear(self) -> int:
        with self._lock:
            dropped = len(self._tasks)
            self._tasks.clear()
        return dropped

    def snapshot_len(self) -> int:
        with self._lock:
            return len(self._tasks)

    def stats(self) -> QueueStats:
        return QueueStats(
            queued=self.snapshot_len(),
            total_enqueued=self.total_enqueued.value,
            total_processed=self.total_processed.value,
            backlog=self.backlog,
        )
