"""
GoalStore - the authoritative in-memory collection of bucket list goals.

Every mutation updates the collection first and then writes the whole
collection to the persistence adapter. Statistics and filters are computed
from the live collection on every call.
"""

import json
import logging
import uuid
from contextlib import ExitStack, contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from ...errors import NotFoundError, PersistenceError, ValidationError
from ...observability import NullSink, ObservabilitySink
from ..models.Goal import (
    Category,
    GoalRecord,
    GoalStatistics,
    normalize_progress,
    normalize_title,
    parse_deadline,
    utc_now,
)
from .persistence import PersistenceAdapter

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"
LOAD_ERROR_MESSAGE = "Failed to load items"
SAVE_ERROR_MESSAGE = "Failed to save items"

MUTABLE_FIELDS = ("title", "description", "category", "deadline", "progress", "completed")


class GoalStore:
    """
    Owns the goal collection and keeps the persisted snapshot in sync with it.

    Validation and not-found errors are raised to the caller. Persistence
    errors are contained: they are logged, sent to the sink and kept in
    `error` until `clear_error()` is called.
    """

    def __init__(
        self,
        persistence: PersistenceAdapter,
        sink: Optional[ObservabilitySink] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.persistence = persistence
        self.sink = sink or NullSink()
        self.clock = clock
        self._items: List[GoalRecord] = []
        self.error: Optional[str] = None

    # OBSERVABILITY HELPERS

    def track(self, action: str, attributes: Optional[Mapping[str, Any]] = None):
        """Send a user action to the sink. Sink failures are logged and ignored."""
        try:
            self.sink.event(action, attributes)
        except Exception as e:
            logger.warning(f"Observability sink failed on event {action}: {e}")

    def _log(self, level: int, message: str, context: Optional[Mapping[str, Any]] = None):
        try:
            self.sink.log(level, message, context)
        except Exception as e:
            logger.warning(f"Observability sink failed on log: {e}")

    @contextmanager
    def _span(self, name: str, attributes: Optional[Mapping[str, Any]] = None):
        with ExitStack() as stack:
            try:
                stack.enter_context(self.sink.span(name, attributes or {}))
            except Exception as e:
                logger.warning(f"Observability sink failed to open span {name}: {e}")
            yield

    # PERSISTENCE

    def load(self) -> List[GoalRecord]:
        """Replace the collection with the persisted snapshot (empty if none or malformed)."""
        with self._span("bucket_list.load_items", {
            "storage.operation": "read",
            "storage.key": self.persistence.key,
        }):
            try:
                blob = self.persistence.read()
                items = self._deserialize(blob) if blob is not None else []
            except PersistenceError as e:
                logger.warning(f"Could not load goals, starting empty: {e}")
                self._log(logging.WARNING, LOAD_ERROR_MESSAGE, {"error": str(e)})
                self._items = []
                self.error = LOAD_ERROR_MESSAGE
                return []

            self._items = items
            logger.info("Loaded %d goals", len(items))
            return self.items

    def _deserialize(self, blob: str) -> List[GoalRecord]:
        try:
            data = json.loads(blob)
        except (TypeError, ValueError, RecursionError) as e:
            raise PersistenceError(f"Snapshot is not valid JSON: {e}") from e
        if not isinstance(data, list):
            raise PersistenceError("Snapshot must be a list of goals")

        items = []
        seen_ids = set()
        for i, entry in enumerate(data):
            try:
                item = GoalRecord.from_dict(entry)
            except (KeyError, TypeError, ValueError, ValidationError) as e:
                raise PersistenceError(f"Malformed goal at position {i}: {e}") from e
            if item.id in seen_ids:
                raise PersistenceError(f"Duplicate goal id {item.id}")
            seen_ids.add(item.id)
            items.append(item)
        return items

    def _save(self) -> bool:
        """Write the whole collection. Returns False (and records the error) on failure."""
        with self._span("bucket_list.save_items", {
            "storage.operation": "write",
            "storage.key": self.persistence.key,
            "items.count": len(self._items),
        }):
            blob = json.dumps([item.to_dict() for item in self._items])
            try:
                self.persistence.write(blob)
            except PersistenceError as e:
                logger.error(f"Could not persist goals: {e}")
                self._log(logging.ERROR, SAVE_ERROR_MESSAGE, {"error": str(e)})
                self.error = SAVE_ERROR_MESSAGE
                return False
            return True

    def clear_error(self):
        self.error = None

    # READS

    @property
    def items(self) -> List[GoalRecord]:
        """Copies of the current goals in insertion order. Edits go through `update`."""
        return [replace(item) for item in self._items]

    def __len__(self) -> int:
        return len(self._items)

    def _index_of(self, item_id: str) -> int:
        for i, item in enumerate(self._items):
            if item.id == item_id:
                return i
        raise NotFoundError(item_id)

    def get(self, item_id: str) -> GoalRecord:
        return replace(self._items[self._index_of(item_id)])

    def filter_by_category(self, category: Union[str, Category]) -> List[GoalRecord]:
        """All goals for "all", otherwise the goals in that category, in order."""
        if category == ALL_CATEGORIES:
            return self.items
        wanted = Category.parse(category)
        return [replace(item) for item in self._items if item.category == wanted]

    def category_counts(self) -> Dict[str, int]:
        """Counts for the filter bar: "all" plus every category."""
        counts = {ALL_CATEGORIES: len(self._items)}
        for category in Category:
            counts[category.value] = 0
        for item in self._items:
            counts[item.category.value] += 1
        return counts

    def statistics(self, now: Optional[datetime] = None) -> GoalStatistics:
        now = now or self.clock()
        total = len(self._items)
        return GoalStatistics(
            total=total,
            completed=sum(1 for item in self._items if item.completed),
            overdue=sum(1 for item in self._items if item.is_overdue(now)),
            average_progress=(
                sum(item.progress for item in self._items) / total if total else 0.0
            ),
        )

    # MUTATIONS

    def _new_id(self) -> str:
        existing = {item.id for item in self._items}
        while True:
            item_id = str(uuid.uuid4())
            if item_id not in existing:
                return item_id

    def add(
        self,
        title: str,
        category: Union[str, Category],
        description: str = "",
        deadline: Any = None,
        progress: Any = 0,
        completed: Optional[bool] = None,
    ) -> GoalRecord:
        """
        Create a goal and persist the collection.

        `completed` defaults to `progress == 100`. A persistence failure does
        not undo the add; it is reported through `error`.
        """
        title = normalize_title(title)
        category = Category.parse(category)
        deadline = parse_deadline(deadline)
        progress = normalize_progress(progress)
        if description is not None and not isinstance(description, str):
            raise ValidationError("Description must be text")
        if completed is None:
            completed = progress == 100
        elif not isinstance(completed, bool):
            raise ValidationError(f"Completed must be true or false, got {completed!r}")

        with self._span("bucket_list.add_item", {
            "item.category": category.value,
            "item.has_deadline": deadline is not None,
        }):
            now = self.clock()
            item = GoalRecord(
                id=self._new_id(),
                title=title,
                description=description or "",
                category=category,
                deadline=deadline,
                progress=progress,
                completed=completed,
                created_at=now,
                updated_at=now,
            )
            self.track("add_bucket_list_item", {
                "item.category": category.value,
                "item.has_deadline": deadline is not None,
                "item.initial_progress": progress,
            })
            self._items.append(item)
            self._save()
            logger.info(f"Added goal {item.id} ({category.value})")
            return replace(item)

    def _clean_updates(self, updates: Mapping[str, Any]) -> Dict[str, Any]:
        unknown = set(updates) - set(MUTABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        cleaned = {}
        for name, value in updates.items():
            if name == "title":
                value = normalize_title(value)
            elif name == "description":
                if value is not None and not isinstance(value, str):
                    raise ValidationError("Description must be text")
                value = value or ""
            elif name == "category":
                value = Category.parse(value)
            elif name == "deadline":
                value = parse_deadline(value)
            elif name == "progress":
                value = normalize_progress(value)
            elif name == "completed":
                if not isinstance(value, bool):
                    raise ValidationError(f"Completed must be true or false, got {value!r}")
            cleaned[name] = value
        return cleaned

    def update(self, item_id: str, **updates: Any) -> GoalRecord:
        """
        Merge the given fields into a goal and persist the collection.

        `completed` is stored exactly as supplied; it is never recomputed
        from progress here.
        """
        with self._span("bucket_list.update_item", {
            "item.id": item_id,
            "update.field_count": len(updates),
        }):
            index = self._index_of(item_id)
            cleaned = self._clean_updates(updates)
            existing = self._items[index]

            self.track("update_bucket_list_item", {
                "item.id": item_id,
                "item.category": existing.category.value,
                "update.fields": ",".join(updates),
            })

            for name, value in cleaned.items():
                setattr(existing, name, value)
            existing.updated_at = max(self.clock(), existing.created_at)

            self._save()
            return replace(existing)

    def delete(self, item_id: str) -> bool:
        with self._span("bucket_list.delete_item", {"item.id": item_id}):
            index = self._index_of(item_id)
            item = self._items[index]

            self.track("delete_bucket_list_item", {
                "item.id": item_id,
                "item.category": item.category.value,
                "item.was_completed": item.completed,
            })

            del self._items[index]
            self._save()
            logger.info(f"Deleted goal {item_id}")
            return True

    def toggle_complete(self, item_id: str) -> GoalRecord:
        """
        Flip a goal's completed flag.

        Completing forces progress to 100. Reopening leaves progress where it
        was, so a reopened goal can sit at 100% while not completed.
        """
        item = self.get(item_id)
        new_status = not item.completed

        self.track("toggle_completion", {
            "item.id": item_id,
            "item.category": item.category.value,
            "completion.new_status": new_status,
        })

        return self.update(
            item_id,
            completed=new_status,
            progress=100 if new_status else item.progress,
        )
