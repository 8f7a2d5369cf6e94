"""Bounded, closable hand-off queue used between pipeline stages."""

import queue
import threading
from typing import Generic, Iterator, TypeVar

from .exceptions import HandoffClosedError

T = TypeVar("T")


class _Closed:
    """Marker placed in the queue by close()."""

    def __repr__(self) -> str:
        return "<closed>"


_CLOSED = _Closed()


class HandoffQueue(Generic[T]):
    """
    Multi-producer/multi-consumer queue with back-pressure and close semantics.

    ``put`` blocks while the queue holds ``capacity`` items. Consumers iterate
    the queue; iteration ends for every consumer once the queue has been
    closed and everything put before the close has been taken. Close only
    after all producers have finished: the close marker takes a slot, so
    no producer may race it.
    """

    def __init__(self, capacity: int, name: str = "handoff"):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self.name = name
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=capacity)
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        return self._queue.qsize()

    def put(self, item: T) -> None:
        """Hand one item over, blocking while the queue is full."""
        if self._closed:
            raise HandoffClosedError(f"{self.name} is closed")
        self._queue.put(item)

    def close(self) -> None:
        """Signal end-of-stream. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[T]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                # Leave the marker for the other consumers
                self._queue.put(_CLOSED)
                return
            yield item  # type: ignore[misc]
