"""Database module for the Bucket List Tracker."""

from .models.Goal import Category, GoalRecord, GoalStatistics
from .repository.goal_store import ALL_CATEGORIES, LOAD_ERROR_MESSAGE, GoalStore
from .repository.persistence import (
    JsonFilePersistence,
    MemoryPersistence,
    PersistenceAdapter,
    SqlitePersistence,
)

__all__ = [
    "ALL_CATEGORIES",
    "LOAD_ERROR_MESSAGE",
    "Category",
    "GoalRecord",
    "GoalStatistics",
    "GoalStore",
    "JsonFilePersistence",
    "MemoryPersistence",
    "PersistenceAdapter",
    "SqlitePersistence",
]
