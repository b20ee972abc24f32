"""
Goal data model for bucket list entries.
Defines the closed category set, the goal record and its derived statistics.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Dict, Optional
import uuid

from ...errors import ValidationError

PROGRESS_STEP = 5


class Category(str, Enum):
    """Fixed set of goal categories."""

    TRAVEL = "travel"
    CAREER = "career"
    FITNESS = "fitness"
    PERSONAL = "personal"
    FAMILY = "family"
    LEARNING = "learning"
    CREATIVE = "creative"
    ADVENTURE = "adventure"

    @property
    def label(self) -> str:
        return self.value.title()

    @property
    def color(self) -> str:
        """Badge colour used by the web UI."""
        return CATEGORY_COLORS[self]

    @classmethod
    def parse(cls, value: Any) -> "Category":
        """Convert a string tag (or Category) into a Category, or raise ValidationError."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        valid = ", ".join(c.value for c in cls)
        raise ValidationError(f"Invalid category {value!r}. Must be one of: {valid}")


CATEGORY_COLORS = {
    Category.TRAVEL: "#db2777",
    Category.CAREER: "#2563eb",
    Category.FITNESS: "#16a34a",
    Category.PERSONAL: "#9333ea",
    Category.FAMILY: "#ea580c",
    Category.LEARNING: "#ca8a04",
    Category.CREATIVE: "#4f46e5",
    Category.ADVENTURE: "#0d9488",
}


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def normalize_progress(value: Any) -> int:
    """
    Clamp progress to 0..100 and snap it to the nearest multiple of 5.
    Booleans and non-numeric values are rejected.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"Progress must be a number between 0 and 100, got {value!r}")
    if value != value:  # NaN
        raise ValidationError("Progress must be a number between 0 and 100, got NaN")
    clamped = min(100, max(0, value))
    return int(PROGRESS_STEP * round(clamped / PROGRESS_STEP))


def normalize_title(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Title is required")
    return value.strip()


def parse_deadline(value: Any) -> Optional[date]:
    """Accept a date, an ISO date string, '' or None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            if "T" in value:
                return parse_timestamp(value).date()
            return date.fromisoformat(value)
        except ValueError:
            pass
    raise ValidationError(f"Invalid deadline {value!r}. Use YYYY-MM-DD format.")


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp; a trailing 'Z' and naive values are read as UTC."""
    if not isinstance(value, str):
        raise ValidationError(f"Invalid timestamp {value!r}")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class GoalRecord:
    """
    One bucket list entry.

    `completed` is an independent flag. It defaults to `progress == 100`
    when a goal is created from the form, but toggling can decouple the two.
    """

    # Required fields
    title: str
    category: Category

    # Optional/default fields
    description: str = ""
    deadline: Optional[date] = None
    progress: int = 0
    completed: bool = False

    ## auto-generated fields
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """Deadline has passed (from midnight UTC of that day) and the goal is still open."""
        if self.deadline is None or self.completed:
            return False
        now = now or utc_now()
        due = datetime.combine(self.deadline, time.min, tzinfo=timezone.utc)
        return due < now

    def days_until_deadline(self, today: Optional[date] = None) -> Optional[int]:
        if self.deadline is None:
            return None
        return (self.deadline - (today or date.today())).days

    def to_dict(self) -> dict:
        """Convert GoalRecord instance to its snapshot dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "progress": self.progress,
            "completed": self.completed,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GoalRecord":
        """Create GoalRecord from a snapshot dictionary. Raises on malformed data."""
        if not isinstance(data, dict):
            raise ValidationError(f"Goal entry must be an object, got {type(data).__name__}")

        item_id = data["id"]
        if not isinstance(item_id, str) or not item_id:
            raise ValidationError(f"Invalid goal id {item_id!r}")

        progress = normalize_progress(data.get("progress", 0))
        completed = data.get("completed", progress == 100)
        if not isinstance(completed, bool):
            raise ValidationError(f"Invalid completed flag {completed!r}")

        description = data.get("description") or ""
        if not isinstance(description, str):
            raise ValidationError("Description must be text")

        created_at = parse_timestamp(data["createdAt"])
        updated_at = parse_timestamp(data.get("updatedAt") or data["createdAt"])

        return cls(
            id=item_id,
            title=normalize_title(data["title"]),
            description=description,
            category=Category.parse(data["category"]),
            deadline=parse_deadline(data.get("deadline")),
            progress=progress,
            completed=completed,
            created_at=created_at,
            updated_at=max(created_at, updated_at),
        )


@dataclass(frozen=True)
class GoalStatistics:
    """Aggregate numbers derived from the live collection."""

    total: int = 0
    completed: int = 0
    overdue: int = 0
    average_progress: float = 0.0

    @property
    def completion_rate(self) -> float:
        """Share of completed goals, in percent."""
        if self.total == 0:
            return 0.0
        return self.completed / self.total * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "completed": self.completed,
            "overdue": self.overdue,
            "averageProgress": self.average_progress,
        }
