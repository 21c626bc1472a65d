from __future__ import annotations

import heapq
import itertools
import math
from typing import Generic, List, Optional

import trio

from lossylink.core.types import QueuedItem, T


class DelayBuffer(Generic[T]):
    """Min-heap of items keyed by scheduled delivery instant.

    Items with equal instants come out in insertion order.
    """

    def __init__(self) -> None:
        self._heap: List[QueuedItem[T]] = []
        self._counter = itertools.count()

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def push(self, data: T, due: float) -> bool:
        """Queue ``data`` for ``due``; returns True if it became the head."""
        item = QueuedItem(due=float(due), seq=next(self._counter), data=data)
        heapq.heappush(self._heap, item)
        return self._heap[0] is item

    def peek(self) -> Optional[QueuedItem[T]]:
        return self._heap[0] if self._heap else None

    def pop_due(self, now: float) -> Optional[QueuedItem[T]]:
        if self._heap and self._heap[0].due <= now:
            return heapq.heappop(self._heap)
        return None


class WakeTimer:
    """Single re-armable deadline tracking the head of a DelayBuffer.

    ``math.inf`` means inert: a cancel scope built from it never fires.
    """

    def __init__(self) -> None:
        self.deadline = math.inf

    @property
    def armed(self) -> bool:
        return self.deadline != math.inf

    def rearm(self, deadline: float) -> None:
        self.deadline = float(deadline)

    def disarm(self) -> None:
        self.deadline = math.inf

    def track(self, buffer: DelayBuffer) -> None:
        head = buffer.peek()
        if head is None:
            self.disarm()
        else:
            self.rearm(head.due)

    def scope(self) -> trio.CancelScope:
        return trio.move_on_at(self.deadline)

    async def wait(self) -> None:
        await trio.sleep_until(self.deadline)
