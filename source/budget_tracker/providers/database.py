"""This module provides a singleton database connection manager for the application."""

import threading

from budget_tracker.providers.config import Config, ConfigProvider
from budget_tracker.providers.logging import Logger, LoggingProvider
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine


class DatabaseManager:
    """Manages a thread-safe connection pool for PostgreSQL using SQLAlchemy."""

    _engine: Engine | None = None
    _lock_engine: Engine | None = None
    _engine_creation_lock = threading.Lock()

    def __new__(cls) -> "DatabaseManager":
        """Ensures that only one instance of this class can be created.

        Returns:
            The singleton instance of the DatabaseManager.
        """
        if not hasattr(cls, "instance"):
            cls.instance = super().__new__(cls)
        return cls.instance

    @staticmethod
    def _connect_args(config: Config) -> dict[str, str]:
        """Builds the driver arguments, pinning the search path to the configured schema."""
        if config.POSTGRES_DB_SCHEMA:
            return {"options": f"-csearch_path={config.POSTGRES_DB_SCHEMA}"}
        return {}

    @classmethod
    def get_engine(cls) -> Engine:
        """Retrieves a singleton instance of the SQLAlchemy engine.

        Returns:
            The singleton instance of the SQLAlchemy engine.
        """
        if cls._engine is None:
            with cls._engine_creation_lock:
                if cls._engine is None:
                    logger: Logger = LoggingProvider().get_logger()
                    config: Config = ConfigProvider.get_config()

                    logger.info("Initializing database engine...")
                    if config.POSTGRES_DB_SCHEMA:
                        logger.info(f"Using isolated schema: {config.POSTGRES_DB_SCHEMA}")

                    cls._engine = create_engine(
                        config.database_url,
                        pool_size=10,
                        max_overflow=20,
                        pool_pre_ping=True,
                        connect_args=cls._connect_args(config),
                    )
                    logger.info("SQLAlchemy engine created successfully.")
        return cls._engine

    @classmethod
    def get_lock_engine(cls) -> Engine:
        """Retrieves the engine reserved for allocation advisory locks.

        An advisory lock keeps its connection checked out while the guarded
        block runs queries on the main engine. Lock connections therefore
        come from a separate, bounded pool, so lock holders can never exhaust
        the pool they need for their own reads and writes.

        Returns:
            The singleton instance of the lock engine.
        """
        if cls._lock_engine is None:
            with cls._engine_creation_lock:
                if cls._lock_engine is None:
                    logger: Logger = LoggingProvider().get_logger()
                    config: Config = ConfigProvider.get_config()

                    logger.info("Initializing allocation lock engine...")
                    cls._lock_engine = create_engine(
                        config.database_url,
                        pool_size=config.ALLOCATION_LOCK_POOL_SIZE,
                        max_overflow=0,
                        pool_pre_ping=True,
                        connect_args=cls._connect_args(config),
                    )
        return cls._lock_engine

    @classmethod
    def release_engine(cls) -> None:
        """Disposes of the connection pools and resets the singleton instances."""
        logger: Logger = LoggingProvider().get_logger()
        if cls._engine:
            logger.info("Disposing of the database engine.")
            cls._engine.dispose()
            cls._engine = None
        if cls._lock_engine:
            cls._lock_engine.dispose()
            cls._lock_engine = None
