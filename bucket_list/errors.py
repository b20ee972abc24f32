"""Error types raised by the goal store and its persistence adapters."""


class BucketListError(Exception):
    """Base class for all bucket list errors."""


class ValidationError(BucketListError):
    """A goal field failed validation (empty title, bad category, bad progress...)."""


class NotFoundError(BucketListError):
    """An operation referenced a goal id that is not in the collection."""

    def __init__(self, item_id: str):
        super().__init__(f"Item with id {item_id} not found")
        self.item_id = item_id


class PersistenceError(BucketListError):
    """Reading or writing the persisted snapshot failed."""
