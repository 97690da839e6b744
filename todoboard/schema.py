"""
Todo board schema: tasks, identifiers and notification events.

A task is created once, may have its category changed any number of times,
and is then deleted. Only the category is mutable.
"""
import re
import time
import uuid
from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict

REQUIRED_FIELDS = ("title", "description", "category", "email")

_TASK_ID_RE = re.compile(r"[0-9a-f]{24}")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def make_task_id() -> str:
    """Generate a sortable 24-hex identifier (epoch seconds + random hex)."""
    ts = int(time.time())
    rand = uuid.uuid4().hex[:16]
    return f"{ts:08x}{rand}"


def is_valid_task_id(value: Any) -> bool:
    """True if ``value`` has the shape of an identifier the store generates."""
    return isinstance(value, str) and _TASK_ID_RE.fullmatch(value) is not None


class EventKind(Enum):
    """Notification kinds, valued by their wire names."""
    TASK_ADDED = "taskAdded"
    TASK_UPDATED = "taskUpdated"
    TASK_DELETED = "taskDeleted"


@dataclass
class Task:
    """A titled, described, categorized item owned by an email-identified submitter."""

    id: str
    title: str
    description: str
    category: str
    email: str
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the wire shape (``_id`` / ``createdAt`` keys)."""
        return {
            "_id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "email": self.email,
            "createdAt": self.created_at.isoformat() if isinstance(self.created_at, datetime) else self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Deserialize from the wire shape or a store row."""
        created = data.get("createdAt") or data.get("created_at")
        return cls(
            id=data.get("_id") or data.get("id", ""),
            title=data.get("title", ""),
            description=data.get("description", ""),
            category=data.get("category", ""),
            email=data.get("email", ""),
            created_at=datetime.fromisoformat(created) if isinstance(created, str) else (created or utc_now()),
        )


@dataclass(frozen=True)
class BoardEvent:
    """A transient notification announcing one committed mutation."""

    kind: EventKind
    payload: Dict[str, Any]

    @property
    def name(self) -> str:
        return self.kind.value

    @classmethod
    def task_added(cls, task: Task) -> "BoardEvent":
        return cls(EventKind.TASK_ADDED, task.to_dict())

    @classmethod
    def task_updated(cls, task_id: str, category: str) -> "BoardEvent":
        return cls(EventKind.TASK_UPDATED, {"id": task_id, "category": category})

    @classmethod
    def task_deleted(cls, task_id: str) -> "BoardEvent":
        return cls(EventKind.TASK_DELETED, {"id": task_id})
