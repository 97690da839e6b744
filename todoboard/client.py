"""
Board client: a listening viewer with a local, advisory task cache.

The cache follows the server by applying notification events as they
arrive. Events can be missed (disconnects, full queues), so reload() is
always available to reconcile with the store.
"""
import json
import logging
from typing import Dict, Iterable, Iterator, List, Optional

import requests

from .schema import BoardEvent, EventKind, Task

logger = logging.getLogger(__name__)


def parse_sse_lines(lines: Iterable[str]) -> Iterator[BoardEvent]:
    """
    Parse Server-Sent Event lines into BoardEvents.

    Comment lines (keep-alives) and unknown event names are skipped.
    """
    name: Optional[str] = None
    data: List[str] = []
    for line in lines:
        if isinstance(line, bytes):
            line = line.decode("utf-8")
        if line == "":
            if name and data:
                try:
                    kind = EventKind(name)
                    yield BoardEvent(kind, json.loads("\n".join(data)))
                except (ValueError, json.JSONDecodeError) as e:
                    logger.warning(f"Skipping malformed event {name!r}: {e}")
            name, data = None, []
        elif line.startswith(":"):
            continue
        elif line.startswith("event:"):
            name = line[len("event:"):].strip()
        elif line.startswith("data:"):
            data.append(line[len("data:"):].lstrip())


class BoardClient:
    """HTTP + event-stream client keeping a cache of tasks by id."""

    def __init__(self, base_url: str, timeout: float = 5.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.tasks: Dict[str, Task] = {}

    def reload(self) -> List[Task]:
        """Replace the cache with the server's full list."""
        r = self.session.get(f"{self.base_url}/todos", timeout=self.timeout)
        r.raise_for_status()
        tasks = [Task.from_dict(item) for item in r.json()]
        self.tasks = {t.id: t for t in tasks}
        return tasks

    def apply(self, event: BoardEvent) -> None:
        """Fold one event into the cache. Unknown ids are ignored."""
        if event.kind is EventKind.TASK_ADDED:
            task = Task.from_dict(event.payload)
            self.tasks[task.id] = task
        elif event.kind is EventKind.TASK_UPDATED:
            task = self.tasks.get(event.payload.get("id"))
            if task is not None:
                task.category = event.payload.get("category", task.category)
        elif event.kind is EventKind.TASK_DELETED:
            self.tasks.pop(event.payload.get("id"), None)

    def listen(self) -> Iterator[BoardEvent]:
        """Stream events from the server, applying each before yielding it."""
        with self.session.get(f"{self.base_url}/events", stream=True, timeout=(self.timeout, None)) as r:
            r.raise_for_status()
            for event in parse_sse_lines(r.iter_lines(decode_unicode=True)):
                self.apply(event)
                yield event
