"""Bucket List Tracker - create, track and complete your life goals."""

import logging

from .config import Config
from .database import (
    LOAD_ERROR_MESSAGE,
    Category,
    GoalRecord,
    GoalStatistics,
    GoalStore,
    JsonFilePersistence,
    MemoryPersistence,
    PersistenceAdapter,
    SqlitePersistence,
)
from .errors import BucketListError, NotFoundError, PersistenceError, ValidationError
from .observability import ObservabilitySink, create_sink, setup_tracing

logger = logging.getLogger(__name__)

_tracing_initialized = False


def create_persistence(config=Config) -> PersistenceAdapter:
    """Build the persistence adapter named by STORAGE_BACKEND."""
    backend = config.STORAGE_BACKEND
    if backend == "sqlite":
        return SqlitePersistence(db_path=config.DATABASE_PATH, key=config.STORAGE_KEY)
    if backend == "json":
        return JsonFilePersistence(path=config.SNAPSHOT_PATH, key=config.STORAGE_KEY)
    if backend == "memory":
        return MemoryPersistence(key=config.STORAGE_KEY)
    raise ValueError(f"Unknown storage backend: {backend}")


def create_store(config=Config, persistence=None, sink=None, load: bool = True) -> GoalStore:
    """Factory function to create a configured, loaded goal store."""
    global _tracing_initialized

    # Set up tracing (only once per process)
    if config.TRACING_ENABLED and not _tracing_initialized:
        setup_tracing(enable=True, otlp_endpoint=config.OTLP_ENDPOINT, service_name=config.SERVICE_NAME)
        _tracing_initialized = True

    if sink is None:
        sink = create_sink(config.OBSERVABILITY, service_name=config.SERVICE_NAME)

    storage_error = None
    if persistence is None:
        try:
            persistence = create_persistence(config)
        except PersistenceError as e:
            logger.warning(f"Storage unavailable, goals will only be kept for this session: {e}")
            persistence = MemoryPersistence(key=config.STORAGE_KEY)
            storage_error = LOAD_ERROR_MESSAGE

    store = GoalStore(persistence, sink=sink)
    if load:
        store.load()
    if storage_error:
        store.error = storage_error
    return store


__all__ = [
    "BucketListError",
    "Category",
    "Config",
    "GoalRecord",
    "GoalStatistics",
    "GoalStore",
    "JsonFilePersistence",
    "MemoryPersistence",
    "NotFoundError",
    "ObservabilitySink",
    "PersistenceAdapter",
    "PersistenceError",
    "SqlitePersistence",
    "ValidationError",
    "create_persistence",
    "create_store",
]
