"""Credential pool with a rotation cursor.

The store is the only shared mutable state in the gateway. It is owned by the
composition root and handed to every executor that should rotate through the
same pool, so two executors sharing one store also share the cursor.

The pool is an immutable tuple that is replaced wholesale by
``set_credentials``; the cursor only moves through ``advance``. No lock
serializes access: concurrent calls that hit quota errors at the same time may
each advance the cursor, costing at most one extra attempt.

Usage:
    >>> store = CredentialStore()
    >>> store.set_credentials("key-a, key-b,,")
    2
    >>> store.current_credential()
    'key-a'
    >>> store.advance()
    1
    >>> store.current_credential()
    'key-b'
"""

import logging
from typing import Any, Dict, Tuple

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

_DEFAULT_NO_CREDENTIALS = "No credentials configured"


def parse_credentials(raw: str) -> Tuple[str, ...]:
    """Split a comma-separated credential string into a clean pool.

    Pieces are trimmed and empty pieces dropped. Duplicates are kept.
    """
    return tuple(piece.strip() for piece in (raw or "").split(",") if piece.strip())


def mask_credential(credential: str) -> str:
    """Return a log-safe form of a credential showing only its last 4 chars."""
    if len(credential) <= 4:
        return "****"
    return f"...{credential[-4:]}"


class CredentialStore:
    """Ordered pool of credentials with a cursor at the current one."""

    def __init__(
        self,
        raw: str = "",
        no_credentials_message: str = _DEFAULT_NO_CREDENTIALS,
    ):
        """Initialize the store.

        Args:
            raw: Optional initial comma-separated credential string.
            no_credentials_message: Message for the ConfigurationError raised
                when a credential is requested from an empty pool.
        """
        self.no_credentials_message = no_credentials_message
        self._pool: Tuple[str, ...] = ()
        self._cursor = 0
        if raw:
            self.set_credentials(raw)

    @property
    def pool(self) -> Tuple[str, ...]:
        """Return the current pool (immutable snapshot)."""
        return self._pool

    @property
    def size(self) -> int:
        return len(self._pool)

    @property
    def cursor(self) -> int:
        """Return the zero-based index of the current credential."""
        return self._cursor

    def is_empty(self) -> bool:
        return not self._pool

    def set_credentials(self, raw: str) -> int:
        """Replace the pool from a comma-separated string and reset the cursor.

        Args:
            raw: Comma-separated credentials.

        Returns:
            Number of credentials in the new pool.
        """
        self._pool = parse_credentials(raw)
        self._cursor = 0
        logger.info("Initialized with %d API key(s)", len(self._pool))
        return len(self._pool)

    def current_credential(self) -> str:
        """Return the credential at the cursor.

        Raises:
            ConfigurationError: If the pool is empty.
        """
        pool = self._pool
        if not pool:
            raise ConfigurationError(self.no_credentials_message)
        return pool[self._cursor]

    def advance(self) -> int:
        """Move the cursor to the next credential, wrapping around.

        Returns:
            The new cursor position.

        Raises:
            ConfigurationError: If the pool is empty.
        """
        if not self._pool:
            raise ConfigurationError(self.no_credentials_message)
        self._cursor = (self._cursor + 1) % len(self._pool)
        return self._cursor

    def get_stats(self) -> Dict[str, Any]:
        """Return pool statistics safe for logging or health output."""
        return {
            "size": len(self._pool),
            "cursor": self._cursor,
            "current": mask_credential(self._pool[self._cursor]) if self._pool else None,
        }
