"""Task model for the tracker."""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

# Some writers emit up to nine fractional digits; fromisoformat wants six.
_FRACTION_RE = re.compile(r"\.(\d+)")


def now() -> datetime:
    """Current local time, timezone-aware."""
    return datetime.now().astimezone()


def format_timestamp(value: datetime) -> str:
    return value.isoformat()


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp as stored in the data file.

    Accepts a trailing ``Z`` and fractional seconds of any precision.
    Naive values are taken as local time.

    Raises:
        ValueError: If the value is not a valid timestamp string.
    """
    if not isinstance(value, str):
        raise ValueError(f"expected a timestamp string, got {value!r}")
    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


@dataclass
class Task:
    """A single to-do item.

    Attributes:
        id: Positive integer, unique within the list and never reused
        title: Free-form, non-empty title
        done: Whether the task has been completed
        created_at: When the task was created (never changes afterwards)
        done_at: When the task was last marked done, None while open
    """

    id: int
    title: str
    created_at: datetime
    done: bool = False
    done_at: Optional[datetime] = None

    @classmethod
    def create(cls, task_id: int, title: str) -> "Task":
        """Build a new open task stamped with the current time."""
        return cls(id=task_id, title=title, created_at=now())

    def complete(self) -> None:
        """Mark the task as done.

        Completing an already done task keeps it done and moves ``done_at``
        to the current time.
        """
        self.done = True
        self.done_at = now()

    def to_dict(self) -> dict:
        """Serialise to the persisted object, keys in file order."""
        data = {
            "id": self.id,
            "title": self.title,
            "done": self.done,
            "created_at": format_timestamp(self.created_at),
        }
        if self.done_at is not None:
            data["done_at"] = format_timestamp(self.done_at)
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "Task":
        """Build a task from a persisted object.

        Raises:
            ValueError: If the object does not have the task shape.
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected a task object, got {type(data).__name__}")

        task_id = data.get("id")
        if isinstance(task_id, bool) or not isinstance(task_id, int) or task_id < 1:
            raise ValueError(f"invalid task id {task_id!r}")

        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ValueError(f"task #{task_id} has no title")

        done = data.get("done", False)
        if not isinstance(done, bool):
            raise ValueError(f"task #{task_id} has a non-boolean 'done' field")

        if "created_at" not in data:
            raise ValueError(f"task #{task_id} is missing 'created_at'")
        created_at = parse_timestamp(data["created_at"])

        done_at = None
        raw_done_at = data.get("done_at")
        if raw_done_at not in (None, ""):
            done_at = parse_timestamp(raw_done_at)
            # 0001-01-01 is the zero time written for tasks never completed
            if done_at.year == 1:
                done_at = None

        return cls(id=task_id, title=title, created_at=created_at, done=done, done_at=done_at)

    def __str__(self) -> str:
        box = "x" if self.done else " "
        return f"[{box}] #{self.id} {self.title}"
