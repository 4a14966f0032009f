"""Gateway: the request-handling surface composed from the broker parts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger

from foxgate.gateway.credentials import CredentialStore
from foxgate.gateway.errors import ErrorKind, GatewayError
from foxgate.gateway.session import (
    DEFAULT_PASSWORD_LENGTH,
    MAX_PASSWORD_LENGTH,
    MIN_PASSWORD_LENGTH,
    SessionManager,
)
from foxgate.gateway.state import DeviceStateCache
from foxgate.gateway.task_queue import QueueStats, TaskQueue
from foxgate.gateway.tasks import DeviceState, Task, parse_device_state, parse_tasks

_INVALID_PASSWORD = "Invalid password"


@dataclass(slots=True)
class GatewayResult:
    """Outcome of one gateway operation."""

    success: bool
    value: Any = None
    error: ErrorKind | None = None
    message: str = ""

    @classmethod
    def ok(cls, value: Any = None) -> "GatewayResult":
        return cls(True, value)

    @classmethod
    def fail(cls, error: ErrorKind, message: str) -> "GatewayResult":
        return cls(False, None, error, message)

    @classmethod
    def from_error(cls, exc: GatewayError) -> "GatewayResult":
        return cls(False, None, exc.kind, exc.message)


@dataclass(frozen=True, slots=True)
class EnqueueOutcome:
    accepted: int
    total: int

    @property
    def complete(self) -> bool:
        return self.accepted == self.total


@dataclass(frozen=True, slots=True)
class OnlineChange:
    changed: bool
    previous: bool


@dataclass(frozen=True, slots=True)
class StateView:
    state: DeviceState
    is_online: bool


class Gateway:
    """Delegates to the credential store, session manager, queue and state cache.

    Each operation touches one lock domain at a time and never calls another
    operation, so no two domain locks are ever held together.
    """

    def __init__(
        self,
        *,
        server_password: str,
        backlog: int,
        session_default_length: int = DEFAULT_PASSWORD_LENGTH,
        session_min_length: int = MIN_PASSWORD_LENGTH,
        session_max_length: int = MAX_PASSWORD_LENGTH,
    ) -> None:
        self.credentials = CredentialStore(server_password)
        self.sessions = SessionManager(
            self.credentials,
            default_length=session_default_length,
            min_length=session_min_length,
            max_length=session_max_length,
        )
        self.queue = TaskQueue(backlog)
        self.state = DeviceStateCache()

    @classmethod
    def from_config(cls, config: Any) -> "Gateway":
        return cls(
            server_password=config.server.password,
            backlog=config.server.backlog,
            session_default_length=config.session.default_length,
            session_min_length=config.session.min_length,
            session_max_length=config.session.max_length,
        )

    # Client operations

    def authenticate_client(self, secret: str | None) -> bool:
        return self.credentials.validate_client(secret)

    def get_state(self, secret: str | None) -> GatewayResult:
        if not self.credentials.validate_client(secret):
            return self._auth_failed("getstate")
        state, online = self.state.read_with_online()
        return GatewayResult.ok(StateView(state=state, is_online=online))

    def enqueue_tasks(self, secret: str | None, tasks: Any) -> GatewayResult:
        """Queue as many tasks as the backlog admits.

        A full queue is not an error: the outcome reports how many of the
        submitted tasks were accepted.
        """
        if not self.credentials.validate_client(secret):
            return self._auth_failed("enqueue")
        if tasks is None:
            return GatewayResult.fail(ErrorKind.VALIDATION, "Missing tasks list")
        parsed, error = parse_tasks(tasks)
        if parsed is None:
            return GatewayResult.fail(ErrorKind.VALIDATION, str(error))
        accepted = 0
        for task in parsed:
            if self.queue.enqueue(task):
                accepted += 1
        if accepted < len(parsed):
            logger.debug(
                f"Queue full, accepted {accepted} of {len(parsed)} tasks (backlog={self.queue.backlog})"
            )
        else:
            logger.debug(f"Enqueued {accepted} tasks")
        return GatewayResult.ok(EnqueueOutcome(accepted=accepted, total=len(parsed)))

    # Device operations

    def fetch_tasks(self, server_secret: str | None) -> GatewayResult:
        if not self.credentials.validate_server(server_secret):
            return self._auth_failed("fetch")
        tasks: list[Task] = self.queue.drain_all()
        if tasks:
            logger.debug(f"Device fetched {len(tasks)} tasks")
        return GatewayResult.ok(tasks)

    def set_state(self, server_secret: str | None, state: Any) -> GatewayResult:
        if not self.credentials.validate_server(server_secret):
            return self._auth_failed("setstate")
        if state is None:
            return GatewayResult.fail(ErrorKind.VALIDATION, "Missing state object")
        parsed, error = parse_device_state(state)
        if parsed is None:
            return GatewayResult.fail(ErrorKind.VALIDATION, str(error))
        self.state.replace(parsed)
        return GatewayResult.ok(parsed)

    def set_online(self, server_secret: str | None, online: Any) -> GatewayResult:
        if not self.credentials.validate_server(server_secret):
            return self._auth_failed("setonline")
        if not isinstance(online, bool):
            return GatewayResult.fail(ErrorKind.VALIDATION, "Invalid property type")
        changed, previous = self.state.set_online(online)
        if changed:
            logger.info(f"Device is now {'online' if online else 'offline'}")
        if not online:
            self.sessions.close_on_disconnect()
        return GatewayResult.ok(OnlineChange(changed=changed, previous=previous))

    def new_session(
        self,
        server_secret: str | None,
        explicit_password: Any = None,
        length: Any = None,
    ) -> GatewayResult:
        # An active session is reported before the credential is looked at.
        if self.sessions.is_active:
            return GatewayResult.fail(ErrorKind.SESSION_CONFLICT, "Session already in progress")
        if not self.credentials.validate_server(server_secret):
            return self._auth_failed("newsession")
        if explicit_password is not None and not isinstance(explicit_password, str):
            return GatewayResult.fail(ErrorKind.VALIDATION, "Invalid new_password type")
        if length is not None and (isinstance(length, bool) or not isinstance(length, int)):
            return GatewayResult.fail(ErrorKind.VALIDATION, "Invalid length type")
        try:
            password = self.sessions.open(explicit_password=explicit_password, length=length)
        except GatewayError as e:
            return GatewayResult.from_error(e)
        return GatewayResult.ok(password)

    # Administration

    def clear_queue(self) -> int:
        return self.queue.clear()

    def queue_stats(self) -> QueueStats:
        return self.queue.stats()

    @staticmethod
    def _auth_failed(operation: str) -> GatewayResult:
        logger.warning(f"Rejected {operation} request: invalid password")
        return GatewayResult.fail(ErrorKind.AUTH, _INVALID_PASSWORD)
