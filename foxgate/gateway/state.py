"""Cache of the single authoritative device state."""

from __future__ import annotations

from foxgate.gateway.tasks import DeviceState
from foxgate.utils.rwlock import ReadWriteLock


class DeviceStateCache:
    """Holds the last state pushed by the device and its online flag.

    State is replaced wholesale; there is no field-level patching. Callers
    that need read-modify-write accept the race between their read and
    their write.
    """

    def __init__(self, initial: DeviceState | None = None) -> None:
        self._state = initial or DeviceState()
        self._online = False
        self._lock = ReadWriteLock()

    def replace(self, new_state: DeviceState) -> None:
        with self._lock.write():
            self._state = new_state

    def read(self) -> DeviceState:
        # DeviceState is frozen, so handing out the reference is a snapshot.
        with self._lock.read():
            return self._state

    def read_with_online(self) -> tuple[DeviceState, bool]:
        with self._lock.read():
            return self._state, self._online

    @property
    def is_online(self) -> bool:
        with self._lock.read():
            return self._online

    def set_online(self, online: bool) -> tuple[bool, bool]:
        """Store the flag and return ``(changed, previous)``."""
        with self._lock.write():
            previous = self._online
            self._online = bool(online)
        return previous != bool(online), previous
