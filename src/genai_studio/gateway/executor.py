"""Retry-and-rotate executor for credential-bound remote calls.

Each top-level call runs as a small state machine:

    ATTEMPTING(pos) -> (success)              -> SUCCEEDED
    ATTEMPTING(pos) -> (QUOTA, untried left)  -> ATTEMPTING(pos + 1)
    ATTEMPTING(pos) -> (QUOTA, all tried)     -> EXHAUSTED
    ATTEMPTING(pos) -> (any other category)   -> FAILED

Attempts within one call are strictly sequential. The cursor advance is
written to the shared CredentialStore, so later calls start from the last
credential that was not known to be exhausted.

Example:
    store = CredentialStore("key-a,key-b")
    executor = RotatingExecutor(store)

    async def call(api_key):
        return await client.generate_content(api_key, model, payload)

    data = await executor.execute(call, default_message="Generation failed")
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional, Set, TypeVar

from ..messages import ENGLISH, MessageCatalog
from .classifier import classify_error
from .credentials import CredentialStore
from .errors import ConfigurationError, CredentialsExhaustedError, ErrorCategory

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AttemptState(Enum):
    """States of a single executor invocation."""

    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    EXHAUSTED = "exhausted"


TransitionCallback = Callable[[AttemptState, Optional[int]], None]


@dataclass
class RotationAttempts:
    """Cursor positions tried during one top-level call."""

    start_position: int
    attempted: Set[int] = field(default_factory=set)

    @property
    def count(self) -> int:
        return len(self.attempted)

    def record(self, position: int) -> None:
        self.attempted.add(position)


class RotatingExecutor:
    """Runs credential-bound operations, rotating on quota failures.

    Only QUOTA failures rotate. Every other category is raised immediately,
    including AUTH: a revoked credential fails the call instead of being
    skipped.
    """

    def __init__(
        self,
        store: CredentialStore,
        catalog: MessageCatalog = ENGLISH,
        on_transition: Optional[TransitionCallback] = None,
    ):
        """Initialize the executor.

        Args:
            store: Credential pool, possibly shared with other executors.
            catalog: Message catalog for classified errors.
            on_transition: Optional callback receiving (state, position) on
                every state change.
        """
        self._store = store
        self._catalog = catalog
        self._on_transition = on_transition

    @property
    def store(self) -> CredentialStore:
        return self._store

    @property
    def catalog(self) -> MessageCatalog:
        return self._catalog

    def _transition(self, state: AttemptState, position: Optional[int]) -> None:
        if self._on_transition is not None:
            self._on_transition(state, position)

    async def execute(
        self,
        operation: Callable[[str], Awaitable[T]],
        default_message: Optional[str] = None,
    ) -> T:
        """Run an operation with the current credential, rotating on quota.

        Args:
            operation: Async callable taking one credential.
            default_message: Message for failures that classify as UNKNOWN
                without a usable message of their own.

        Returns:
            The operation's result from the first successful attempt.

        Raises:
            ConfigurationError: If the pool is empty (operation not invoked).
            CredentialsExhaustedError: If every credential failed with QUOTA.
            GatewayError: The classified error of the first non-quota failure.
        """
        if self._store.is_empty():
            raise ConfigurationError(self._catalog.no_credentials)

        attempts = RotationAttempts(start_position=self._store.cursor)

        while attempts.count < self._store.size:
            position = self._store.cursor
            credential = self._store.current_credential()
            attempts.record(position)
            self._transition(AttemptState.ATTEMPTING, position)

            try:
                result = await operation(credential)
            except Exception as exc:
                error = classify_error(exc, default_message, self._catalog)
                logger.warning(
                    "API call with key index %d failed (%s)",
                    position,
                    error.category.value,
                )
                if error.category != ErrorCategory.QUOTA:
                    self._transition(AttemptState.FAILED, position)
                    if error is exc:
                        raise
                    raise error from exc

                new_position = self._store.advance()
                logger.info("Quota error. Rotating to key index %d", new_position)
                continue

            self._transition(AttemptState.SUCCEEDED, position)
            return result

        pool_size = self._store.size
        logger.error("All %d API key(s) hit their quota", pool_size)
        self._transition(AttemptState.EXHAUSTED, None)
        raise CredentialsExhaustedError(
            self._catalog.exhausted(pool_size), pool_size=pool_size
        )
