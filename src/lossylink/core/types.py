from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, TypeVar

T = TypeVar("T")

DEFAULT_CAPACITY = 10000
DELAY_DISTRIBUTIONS = ("folded_normal", "truncated_normal", "lognormal")


class ConnState(str, Enum):
    AWAITING_DUE_ITEM = "awaiting_due_item"
    AWAITING_SOURCE_OR_TIMER = "awaiting_source_or_timer"
    DRAINING = "draining"
    CLOSED = "closed"


@dataclass(frozen=True)
class LinkParams:
    loss_rate: float = 0.0
    delay_avg: float = 0.0
    delay_stddev: float = 0.0
    delay_distribution: str = "folded_normal"
    capacity: int = DEFAULT_CAPACITY

    def __post_init__(self) -> None:
        if not _finite(self.loss_rate) or not 0.0 <= self.loss_rate <= 1.0:
            raise ValueError(f"loss_rate must be within [0, 1], got {self.loss_rate!r}")
        if not _finite(self.delay_avg) or self.delay_avg < 0.0:
            raise ValueError(f"delay_avg must be >= 0, got {self.delay_avg!r}")
        if not _finite(self.delay_stddev) or self.delay_stddev < 0.0:
            raise ValueError(f"delay_stddev must be >= 0, got {self.delay_stddev!r}")
        if self.delay_distribution not in DELAY_DISTRIBUTIONS:
            raise ValueError(
                f"Unsupported delay distribution: {self.delay_distribution!r} "
                f"(expected one of {', '.join(DELAY_DISTRIBUTIONS)})"
            )
        if isinstance(self.capacity, bool) or not isinstance(self.capacity, int) or self.capacity <= 0:
            raise ValueError(f"capacity must be a positive integer, got {self.capacity!r}")

    @property
    def is_delayed(self) -> bool:
        return self.delay_avg != 0.0


@dataclass(order=True)
class QueuedItem(Generic[T]):
    due: float
    seq: int
    data: T = field(compare=False)


@dataclass
class LinkStats:
    received: int = 0
    dropped: int = 0
    delayed: int = 0
    delivered: int = 0
    sent: int = 0
    discarded: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _finite(value: Any) -> bool:
    try:
        return math.isfinite(value)
    except TypeError:
        return False
