"""Stateful broker between HTTP clients and the controlled device."""

from foxgate.gateway.control import (
    ControlChannel,
    ControlIntent,
    apply_intent,
    run_control_loop,
)
from foxgate.gateway.core import (
    EnqueueOutcome,
    Gateway,
    GatewayResult,
    OnlineChange,
    StateView,
)
from foxgate.gateway.credentials import CredentialStore
from foxgate.gateway.errors import (
    ErrorKind,
    GatewayError,
    InvalidLengthError,
    SessionConflictError,
)
from foxgate.gateway.session import PASSWORD_ALPHABET, SessionManager, generate_password
from foxgate.gateway.state import DeviceStateCache
from foxgate.gateway.task_queue import QueueStats, TaskQueue
from foxgate.gateway.tasks import (
    DeviceState,
    Mode,
    ModeTask,
    PowerTask,
    SpeedTask,
    Task,
    TaskType,
    parse_device_state,
    parse_task,
    parse_tasks,
    task_to_dict,
)

__all__ = [
    "ControlChannel",
    "ControlIntent",
    "CredentialStore",
    "DeviceState",
    "DeviceStateCache",
    "EnqueueOutcome",
    "ErrorKind",
    "Gateway",
    "GatewayError",
    "GatewayResult",
    "InvalidLengthError",
    "Mode",
    "ModeTask",
    "OnlineChange",
    "PASSWORD_ALPHABET",
    "PowerTask",
    "QueueStats",
    "SessionConflictError",
    "SessionManager",
    "SpeedTask",
    "StateView",
    "Task",
    "TaskQueue",
    "TaskType",
    "apply_intent",
    "generate_password",
    "parse_device_state",
    "parse_task",
    "parse_tasks",
    "run_control_loop",
    "task_to_dict",
]
