"""This module provides the per-user lock that guards budget allocation writes."""

import threading
import weakref
from collections.abc import Generator
from contextlib import contextmanager

from budget_tracker.providers.config import Config, ConfigProvider
from budget_tracker.providers.logging import Logger, LoggingProvider
from sqlalchemy import Engine, text


class AllocationLockProvider:
    """Serializes validate-then-write sequences for a single user.

    Reading the user's income and budget totals and then persisting a budget
    is a check-then-act sequence. Without a guard, two concurrent requests can
    both observe the same totals, both pass validation and both persist. This
    provider holds a per-user lock for the whole sequence.

    Within one process an in-memory `threading.Lock` per user is used. When
    the engine targets PostgreSQL, a session-level advisory lock keyed on the
    user id is additionally held on a dedicated connection, which extends the
    guarantee to every process sharing the database. That engine should have
    its own pool, see `DatabaseManager.get_lock_engine`.

    Args:
        engine: The SQLAlchemy Engine used for advisory locks, or None to
            rely on the in-process lock only.
    """

    ADVISORY_LOCK_NAMESPACE = 7301

    _registry_lock = threading.Lock()
    _user_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()

    logger: Logger
    config: Config
    engine: Engine | None

    def __init__(self, engine: Engine | None = None) -> None:
        """Initializes the provider.

        Args:
            engine: The SQLAlchemy Engine used for advisory locks.
        """
        self.logger = LoggingProvider().get_logger()
        self.config = ConfigProvider.get_config()
        self.engine = engine

    @classmethod
    def _lock_for(cls, user_id: str) -> threading.Lock:
        """Returns the in-process lock dedicated to a user, creating it lazily.

        The registry only keeps weak references, so a user's lock is dropped
        once no caller holds or waits on it.

        Args:
            user_id: The user the lock belongs to.

        Returns:
            The user's lock.
        """
        with cls._registry_lock:
            lock = cls._user_locks.get(user_id)
            if lock is None:
                lock = threading.Lock()
                cls._user_locks[user_id] = lock
            return lock

    def _uses_advisory_lock(self) -> bool:
        """Checks whether the configured engine supports advisory locks.

        Returns:
            True if the engine targets PostgreSQL.
        """
        return self.engine is not None and self.engine.dialect.name == "postgresql"

    @contextmanager
    def hold(self, user_id: str) -> Generator[None, None, None]:
        """Holds the allocation lock of a user for the duration of the block.

        When `ALLOCATION_LOCK_ENABLED` is false the block runs unguarded.

        Args:
            user_id: The user whose allocations are being changed.

        Yields:
            None.
        """
        if not self.config.ALLOCATION_LOCK_ENABLED:
            self.logger.debug(f"Allocation lock disabled; running unguarded for user {user_id}.")
            yield
            return

        with self._lock_for(user_id):
            if not self._uses_advisory_lock():
                yield
                return

            params = {"namespace": self.ADVISORY_LOCK_NAMESPACE, "user_id": user_id}
            with self.engine.connect() as conn:
                self.logger.debug(f"Acquiring advisory allocation lock for user {user_id}.")
                conn.execute(text("SELECT pg_advisory_lock(:namespace, hashtext(:user_id))"), params)
                try:
                    yield
                finally:
                    conn.execute(text("SELECT pg_advisory_unlock(:namespace, hashtext(:user_id))"), params)
                    conn.commit()
                    self.logger.debug(f"Released advisory allocation lock for user {user_id}.")
