"""Client session lifecycle: issuance, exclusivity and teardown."""

from __future__ import annotations

import secrets

from loguru import logger

from foxgate.gateway.credentials import CredentialStore
from foxgate.gateway.errors import InvalidLengthError, SessionConflictError

PASSWORD_ALPHABET = (
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789,.-_/()#+!?"
)
DEFAULT_PASSWORD_LENGTH = 16
MIN_PASSWORD_LENGTH = 10
MAX_PASSWORD_LENGTH = 256


def generate_password(length: int, alphabet: str = PASSWORD_ALPHABET) -> str:
    """Draw ``length`` characters uniformly from ``alphabet`` with a CSPRNG."""
    return "".join(secrets.choice(alphabet) for _ in range(length))


class SessionManager:
    """Keeps at most one client session open at a time."""

    def __init__(
        self,
        credentials: CredentialStore,
        *,
        default_length: int = DEFAULT_PASSWORD_LENGTH,
        min_length: int = MIN_PASSWORD_LENGTH,
        max_length: int = MAX_PASSWORD_LENGTH,
    ) -> None:
        self.credentials = credentials
        self.min_length = max(1, int(min_length))
        self.max_length = max(self.min_length, int(max_length))
        self.default_length = max(self.min_length, int(default_length))

    @property
    def is_active(self) -> bool:
        return self.credentials.has_session()

    def open(
        self,
        explicit_password: str | None = None,
        length: int | None = None,
    ) -> str:
        """Start a session and return its password.

        Raises SessionConflictError when a session is already active and
        InvalidLengthError when a generated password would be shorter than
        ``min_length`` or longer than ``max_length``.
        An explicit password is adopted verbatim regardless of length.
        """
        if self.credentials.has_session():
            raise SessionConflictError()
        if explicit_password:
            password = explicit_password
        else:
            size = self.default_length if length is None else int(length)
            if size < self.min_length:
                raise InvalidLengthError(self.min_length)
            if size > self.max_length:
                raise InvalidLengthError(self.min_length, self.max_length)
            password = generate_password(size)
        if not self.credentials.claim_session(password):
            # Another request opened a session between the check and the claim.
            raise SessionConflictError()
        logger.info("Opened new client session")
        return password

    def close_on_disconnect(self) -> None:
        if self.credentials.has_session():
            logger.info("Device went offline, closing client session")
        self.credentials.clear_session()
