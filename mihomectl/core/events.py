"""Publish/subscribe fan-out of received radio events.

Each subscriber owns a bounded queue. Publishing never blocks: when a
subscriber already holds `maxsize` undelivered events the new event is dropped
for that subscriber only and counted in `Subscription.dropped`.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Iterator

from mihomectl.core.errors import BusClosedError, InvalidParameterError
from mihomectl.core.model import QUEUE_SIZE_DEFAULT, ReceivedEvent

LOGGER = logging.getLogger(__name__)

_CLOSED = object()


class Subscription:
    def __init__(self, maxsize: int) -> None:
        self.maxsize = maxsize
        self.dropped = 0
        self._queue: queue.Queue[object] = queue.Queue()
        self._lock = threading.Lock()
        self._pending = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, timeout: float | None = None) -> ReceivedEvent | None:
        """Return the next event, or None once the subscription is closed.

        Raises `queue.Empty` if `timeout` expires first.
        """
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            # Keep the marker so later calls also see the close.
            self._queue.put(_CLOSED)
            return None
        with self._lock:
            self._pending -= 1
        return item  # type: ignore[return-value]

    def __iter__(self) -> Iterator[ReceivedEvent]:
        while True:
            event = self.get()
            if event is None:
                return
            yield event

    def _offer(self, event: ReceivedEvent) -> bool:
        with self._lock:
            if self._closed or self._pending >= self.maxsize:
                return False
            self._pending += 1
        self._queue.put(event)
        return True

    def _close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put(_CLOSED)


class EventBus:
    def __init__(self, maxsize: int = QUEUE_SIZE_DEFAULT) -> None:
        if maxsize < 1:
            raise InvalidParameterError("Subscriber queue size must be at least 1")
        self._maxsize = maxsize
        self._lock = threading.Lock()
        self._subscriptions: list[Subscription] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscribers(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def subscribe(self, maxsize: int | None = None) -> Subscription:
        size = self._maxsize if maxsize is None else maxsize
        if size < 1:
            raise InvalidParameterError("Subscriber queue size must be at least 1")
        with self._lock:
            if self._closed:
                raise BusClosedError("Cannot subscribe to a closed event bus")
            subscription = Subscription(size)
            self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)
            subscription._close()

    def publish(self, event: ReceivedEvent) -> None:
        with self._lock:
            if self._closed:
                raise BusClosedError("Cannot publish to a closed event bus")
            for subscription in self._subscriptions:
                if not subscription._offer(event):
                    subscription.dropped += 1
                    LOGGER.warning(
                        "Dropped event for slow subscriber (limit %d, %d dropped)",
                        subscription.maxsize,
                        subscription.dropped,
                    )

    def shutdown(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription._close()
