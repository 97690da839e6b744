"""
Mutation coordinator: commits each mutation to the store, then announces it.

The one rule enforced here: a broadcast happens if and only if the store
operation succeeded, and strictly after it returned. Failed mutations raise
their TodoBoardError to the caller and emit nothing. There are no retries.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

from .channel import NotificationChannel
from .schema import REQUIRED_FIELDS, BoardEvent, Task
from .store import TaskStore, UserStore

logger = logging.getLogger(__name__)


class MutationCoordinator:
    """Routes task mutations through the store and out to connected clients."""

    def __init__(self, store: TaskStore, channel: NotificationChannel,
                 users: Optional[UserStore] = None):
        self.store = store
        self.channel = channel
        self.users = users or UserStore(store)

    # ── Reads ──

    def fetch_all(self) -> List[Task]:
        return self.store.list_all()

    def fetch_one(self, task_id: str) -> Optional[Task]:
        return self.store.get_one(task_id)

    # ── Mutations ──

    def submit_create(self, fields: Mapping[str, Any]) -> Task:
        """Create a task and announce it with the full created record."""
        task = self.store.create(*(fields.get(name) for name in REQUIRED_FIELDS))
        logger.info(f"Task added: {task.id} (category={task.category})")
        self.channel.broadcast(BoardEvent.task_added(task))
        return task

    def submit_category_update(self, task_id: str, category: Any) -> Dict[str, Any]:
        """Recategorize a task and announce ``{id, category}``."""
        self.store.update_category(task_id, category)
        category = str(category)
        logger.info(f"Task updated: {task_id} (category={category})")
        self.channel.broadcast(BoardEvent.task_updated(task_id, category))
        return {"success": True, "message": "Task updated successfully"}

    def submit_delete(self, task_id: str) -> Dict[str, Any]:
        """Delete a task and announce ``{id}``."""
        self.store.delete(task_id)
        logger.info(f"Task deleted: {task_id}")
        self.channel.broadcast(BoardEvent.task_deleted(task_id))
        return {"success": True, "message": "Task deleted successfully"}

    # ── Users ──

    def submit_user(self, profile: Dict[str, Any]) -> Dict[str, Any]:
        """Store a user profile. Users are not part of the notification stream."""
        result = self.users.create(profile)
        logger.info(f"User added: {result['insertedId']}")
        return result
