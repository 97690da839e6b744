"""
Notification channel: fan-out of board events to every connected client.

Each connected client holds a Subscription backed by a bounded queue.
broadcast() drops the event into every live queue without waiting; a client
whose queue is full misses that event and has to reload the full list.
Nothing is persisted and nothing is replayed.
"""
import logging
import queue
import threading
import uuid
from typing import Callable, List, Optional, Set

from .schema import BoardEvent

logger = logging.getLogger(__name__)

Hook = Callable[["Subscription"], None]


class Subscription:
    """One connected client's view of the channel."""

    def __init__(self, channel: "NotificationChannel", maxsize: int):
        self.id = uuid.uuid4().hex[:12]
        self._channel = channel
        self._queue: "queue.Queue[BoardEvent]" = queue.Queue(maxsize=maxsize)
        self.dropped = 0
        self._dropped_lock = threading.Lock()

    def offer(self, event: BoardEvent) -> bool:
        """Enqueue without blocking. Returns False if the event was dropped."""
        try:
            self._queue.put_nowait(event)
            return True
        except queue.Full:
            with self._dropped_lock:
                self.dropped += 1
            return False

    def get(self, timeout: Optional[float] = None) -> Optional[BoardEvent]:
        """Next event, or None if nothing arrived within ``timeout``."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def pending(self) -> List[BoardEvent]:
        """Drain whatever is queued right now."""
        events = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events

    def close(self) -> None:
        self._channel.disconnect(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class NotificationChannel:
    """Stateless relay from the mutation coordinator to connected clients."""

    def __init__(self, queue_size: int = 256):
        self.queue_size = queue_size
        self._subscribers: Set[Subscription] = set()
        self._lock = threading.Lock()
        self._connect_hooks: List[Hook] = []
        self._disconnect_hooks: List[Hook] = []

    # ── Observability hooks ──

    def on_connect(self, callback: Hook) -> None:
        """Register a callback run after a client connects."""
        self._connect_hooks.append(callback)

    def on_disconnect(self, callback: Hook) -> None:
        """Register a callback run after a client disconnects."""
        self._disconnect_hooks.append(callback)

    def _run_hooks(self, hooks: List[Hook], sub: Subscription) -> None:
        for callback in hooks:
            try:
                callback(sub)
            except Exception as e:
                logger.warning(f"Error in channel hook {callback!r}: {e}")

    # ── Connection set ──

    def connect(self) -> Subscription:
        sub = Subscription(self, self.queue_size)
        with self._lock:
            self._subscribers.add(sub)
            count = len(self._subscribers)
        logger.info(f"A client connected: {sub.id} ({count} connected)")
        self._run_hooks(self._connect_hooks, sub)
        return sub

    def disconnect(self, sub: Subscription) -> None:
        with self._lock:
            if sub not in self._subscribers:
                return
            self._subscribers.discard(sub)
            count = len(self._subscribers)
        logger.info(f"A client disconnected: {sub.id} ({count} connected)")
        self._run_hooks(self._disconnect_hooks, sub)

    @property
    def connection_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    # ── Emission ──

    def broadcast(self, event: BoardEvent) -> int:
        """
        Deliver ``event`` to every client connected right now.

        Never blocks and never raises. Returns the number of clients the
        event was queued for.
        """
        try:
            with self._lock:
                targets = list(self._subscribers)
            delivered = 0
            for sub in targets:
                if sub.offer(event):
                    delivered += 1
                else:
                    logger.warning(f"Client {sub.id} queue full, dropped {event.name}")
            logger.debug(f"Broadcast {event.name} to {delivered}/{len(targets)} clients")
            return delivered
        except Exception as e:
            logger.error(f"Broadcast of {event.name} failed: {e}")
            return 0
