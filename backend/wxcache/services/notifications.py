"""Change notifications emitted by the store after successful writes.

Subscribers get their own queue; the store publishes without blocking and
consumers wait with an explicit timeout instead of polling.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


class NotificationTimeout(Exception):
    """No change event arrived within the wait timeout."""


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    row_id: Optional[int] = None  # None for bulk inserts and resets


class Subscription:
    def __init__(self, notifier: "ChangeNotifier") -> None:
        self._notifier = notifier
        self._queue: "queue.Queue[ChangeEvent]" = queue.Queue()
        self.closed = False

    def _deliver(self, event: ChangeEvent) -> None:
        self._queue.put_nowait(event)

    def wait(self, timeout: float = 5.0) -> ChangeEvent:
        """Block until the next event, or raise NotificationTimeout."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            raise NotificationTimeout(
                f"No change notification within {timeout:.1f}s"
            ) from None

    def drain(self) -> list[ChangeEvent]:
        events: list[ChangeEvent] = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events

    def close(self) -> None:
        self._notifier._unsubscribe(self)
        self.closed = True

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class ChangeNotifier:
    """Fan-out of ChangeEvents to every open Subscription."""

    def __init__(self) -> None:
        self._subscribers: list[Subscription] = []
        self._lock = threading.Lock()

    def subscribe(self) -> Subscription:
        sub = Subscription(self)
        with self._lock:
            self._subscribers.append(sub)
        return sub

    def _unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            if sub in self._subscribers:
                self._subscribers.remove(sub)

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        logger.debug("Change on %s (row %s) -> %d subscriber(s)",
                     event.table, event.row_id, len(subscribers))
        for sub in subscribers:
            sub._deliver(event)
