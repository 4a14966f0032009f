"""Credential checks for the device (server) and client trust domains."""

from __future__ import annotations

import hmac

from foxgate.utils.rwlock import ReadWriteLock


def _matches(candidate: str, expected: str) -> bool:
    if not candidate or not expected:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


class CredentialStore:
    """Holds the static server password and the current session password.

    The session slot has its own read/write lock; the server password never
    changes after construction and is read without locking.
    """

    def __init__(self, server_password: str) -> None:
        self._server_password = str(server_password or "")
        self._session_password = ""
        self._session_lock = ReadWriteLock()

    def validate_server(self, secret: str | None) -> bool:
        return _matches(str(secret or ""), self._server_password)

    def validate_client(self, secret: str | None) -> bool:
        with self._session_lock.read():
            session_password = self._session_password
        return _matches(str(secret or ""), session_password)

    def has_session(self) -> bool:
        with self._session_lock.read():
            return bool(self._session_password)

    def claim_session(self, password: str) -> bool:
        """Install ``password`` unless a session is already active."""
        with self._session_lock.write():
            if self._session_password:
                return False
            self._session_password = password
            return True

    def clear_session(self) -> None:
        with self._session_lock.write():
            self._session_password = ""
