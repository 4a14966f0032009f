"""Device commands and device state, plus their JSON wire codec."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, TypeVar, assert_never

I32_MIN = -(2**31)
I32_MAX = 2**31 - 1
U32_MAX = 2**32 - 1

_E = TypeVar("_E", bound=StrEnum)


class TaskType(StrEnum):
    """Discriminant of the task wire object."""

    POWER = "POWER"
    SPEED = "SPEED"
    MODE = "MODE"


class Mode(StrEnum):
    """Operating modes supported by the device firmware."""

    DEFAULT = "DEFAULT"


@dataclass(frozen=True, slots=True)
class PowerTask:
    is_on: bool


@dataclass(frozen=True, slots=True)
class SpeedTask:
    speed: int


@dataclass(frozen=True, slots=True)
class ModeTask:
    mode: Mode


Task = PowerTask | SpeedTask | ModeTask


@dataclass(frozen=True, slots=True)
class DeviceState:
    """Last known or target state reported by the device."""

    accepts_commands: bool = False
    is_on: bool = False
    target_speed: int = 0
    actual_speed: int = 0
    mode: Mode = Mode.DEFAULT

    def to_dict(self) -> dict[str, Any]:
        return {
            "accepts_commands": self.accepts_commands,
            "is_on": self.is_on,
            "target_speed": self.target_speed,
            "actual_speed": self.actual_speed,
            "mode": self.mode.value,
        }


def task_to_dict(task: Task) -> dict[str, Any]:
    """Serialize a task into its wire object."""
    if isinstance(task, PowerTask):
        return {"type": TaskType.POWER.value, "is_on": task.is_on}
    if isinstance(task, SpeedTask):
        return {"type": TaskType.SPEED.value, "speed": task.speed}
    if isinstance(task, ModeTask):
        return {"type": TaskType.MODE.value, "mode": task.mode.value}
    assert_never(task)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_enum(enum_cls: type[_E], value: Any) -> _E | None:
    # Older firmware sends enum ordinals instead of names.
    if _is_int(value):
        members = list(enum_cls)
        if 0 <= value < len(members):
            return members[value]
        return None
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().upper())
        except ValueError:
            return None
    return None


def parse_task(data: Any) -> tuple[Task | None, str | None]:
    """Validate one task wire object.

    Returns ``(task, None)`` on success or ``(None, reason)`` describing the
    first violation found.
    """
    if isinstance(data, (PowerTask, SpeedTask, ModeTask)):
        return data, None
    if not isinstance(data, dict):
        return None, "task must be an object"
    if "type" not in data:
        return None, "missing task type"
    kind = _parse_enum(TaskType, data["type"])
    if kind is None:
        return None, f"unknown task type {data['type']!r}"

    if kind is TaskType.POWER:
        is_on = data.get("is_on")
        if not isinstance(is_on, bool):
            return None, "is_on must be a boolean"
        return PowerTask(is_on=is_on), None
    if kind is TaskType.SPEED:
        speed = data.get("speed")
        if not _is_int(speed) or not I32_MIN <= speed <= I32_MAX:
            return None, "speed must be a signed 32-bit integer"
        return SpeedTask(speed=speed), None
    if kind is TaskType.MODE:
        mode = _parse_enum(Mode, data.get("mode"))
        if mode is None:
            return None, f"unknown mode {data.get('mode')!r}"
        return ModeTask(mode=mode), None
    assert_never(kind)


def parse_tasks(data: Any) -> tuple[list[Task] | None, str | None]:
    """Validate a whole task list; any malformed entry rejects the list."""
    if isinstance(data, tuple):
        data = list(data)
    if not isinstance(data, list):
        return None, "Invalid tasks list type"
    tasks: list[Task] = []
    for index, item in enumerate(data):
        task, error = parse_task(item)
        if task is None:
            return None, f"Invalid task at index {index}: {error}"
        tasks.append(task)
    return tasks, None


def parse_device_state(data: Any) -> tuple[DeviceState | None, str | None]:
    """Validate a full device state object (no partial updates)."""
    if isinstance(data, DeviceState):
        return data, None
    if not isinstance(data, dict):
        return None, "Invalid state object type"
    for name in ("accepts_commands", "is_on"):
        if not isinstance(data.get(name), bool):
            return None, f"Invalid state property {name}: expected boolean"
    for name in ("target_speed", "actual_speed"):
        value = data.get(name)
        if not _is_int(value) or not 0 <= value <= U32_MAX:
            return None, f"Invalid state property {name}: expected unsigned 32-bit integer"
    mode = _parse_enum(Mode, data.get("mode"))
    if mode is None:
        return None, "Invalid state property mode"
    return (
        DeviceState(
            accepts_commands=data["accepts_commands"],
            is_on=data["is_on"],
            target_speed=data["target_speed"],
            actual_speed=data["actual_speed"],
            mode=mode,
        ),
        None,
    )
