from __future__ import annotations

import logging
import math
import random
from datetime import timedelta
from typing import Optional, Sequence, Tuple, Union

import trio

from lossylink.core.delay_buffer import DelayBuffer, WakeTimer
from lossylink.core.types import DEFAULT_CAPACITY, ConnState, LinkParams, LinkStats, QueuedItem, T
from lossylink.utils.seed import derive_rngs

log = logging.getLogger("lossylink.conn")

Duration = Union[float, int, timedelta]

_MAX_RESAMPLE = 64


def sample_delay(rng: random.Random, params: LinkParams) -> float:
    avg = params.delay_avg
    stddev = params.delay_stddev
    if params.delay_distribution == "lognormal":
        if stddev == 0.0:
            return avg
        sigma2 = math.log1p((stddev / avg) ** 2)
        return rng.lognormvariate(math.log(avg) - sigma2 / 2.0, math.sqrt(sigma2))
    if params.delay_distribution == "truncated_normal":
        for _ in range(_MAX_RESAMPLE):
            delay = rng.gauss(avg, stddev)
            if delay >= 0.0:
                return delay
        return abs(delay)
    # folded normal: negative samples are mirrored onto the positive side
    return abs(rng.gauss(avg, stddev))


class LossyConn(trio.abc.Channel[T]):
    """One end of a simulated lossy, jittery datagram link.

    Loss and delay are applied on the receiving side: ``receive`` pulls from
    the peer's transport, drops items with probability ``loss_rate`` and holds
    the survivors in a delay buffer until their sampled delivery instant.
    ``send`` forwards into the peer's transport and silently discards items
    once the peer has gone away.
    """

    def __init__(
        self,
        sender: trio.MemorySendChannel[T],
        receiver: trio.MemoryReceiveChannel[T],
        params: LinkParams,
        rng: Optional[random.Random] = None,
        name: str = "conn",
    ) -> None:
        self._sender = sender
        self._receiver = receiver
        self.params = params
        self.name = name
        self._rng = rng if rng is not None else random.Random()
        self._buffer: DelayBuffer[T] = DelayBuffer()
        self._timer = WakeTimer()
        self._stats = LinkStats()
        self._source_closed = False
        self._state = ConnState.AWAITING_DUE_ITEM

    @property
    def stats(self) -> LinkStats:
        return self._stats

    @property
    def state(self) -> ConnState:
        return self._state

    @property
    def pending(self) -> int:
        return len(self._buffer)

    @property
    def next_delivery(self) -> float:
        return self._timer.deadline

    # ------------------------------------------------------------------
    # pull side

    async def receive(self) -> T:
        await trio.lowlevel.checkpoint_if_cancelled()
        due = self._pop_due()
        if due is not None:
            await trio.lowlevel.cancel_shielded_checkpoint()
            return due.data

        while True:
            if self._source_closed:
                if not self._buffer:
                    self._state = ConnState.CLOSED
                    raise trio.EndOfChannel
                self._state = ConnState.DRAINING
                await self._timer.wait()
            else:
                self._state = ConnState.AWAITING_SOURCE_OR_TIMER
                with self._timer.scope():
                    try:
                        incoming = await self._receiver.receive()
                    except trio.EndOfChannel:
                        log.debug(
                            "%s: source closed, %d packets still queued",
                            self.name,
                            len(self._buffer),
                        )
                        self._source_closed = True
                        continue
                    if self._admit(incoming):
                        self._stats.delivered += 1
                        self._state = ConnState.AWAITING_DUE_ITEM
                        return incoming

            due = self._pop_due()
            if due is not None:
                return due.data

    def _admit(self, incoming: T) -> bool:
        """Apply loss and delay; True means deliver ``incoming`` right away."""
        self._stats.received += 1
        if self._rng.random() < self.params.loss_rate:
            self._stats.dropped += 1
            log.debug("%s: dropping packet %r", self.name, incoming)
            return False
        if not self.params.is_delayed:
            return True

        delay = sample_delay(self._rng, self.params)
        if self._buffer.push(incoming, trio.current_time() + delay):
            self._timer.track(self._buffer)
        self._stats.delayed += 1
        return False

    def _pop_due(self) -> Optional[QueuedItem[T]]:
        item = self._buffer.pop_due(trio.current_time())
        if item is None:
            return None
        self._timer.track(self._buffer)
        self._stats.delivered += 1
        self._state = ConnState.DRAINING if self._source_closed else ConnState.AWAITING_DUE_ITEM
        log.debug(
            "%s: forwarding packet %r, queue.len=%d", self.name, item.data, len(self._buffer)
        )
        return item

    # ------------------------------------------------------------------
    # push side

    async def send(self, value: T) -> None:
        try:
            await self._sender.send(value)
        except (trio.BrokenResourceError, trio.ClosedResourceError) as exc:
            # like a real datagram socket: a rejected packet just vanishes
            self._stats.discarded += 1
            log.debug(
                "%s: transport rejected packet %r (%s)", self.name, value, type(exc).__name__
            )
            return
        self._stats.sent += 1

    async def flush(self) -> None:
        await trio.lowlevel.checkpoint()

    async def close(self) -> None:
        await self._sender.aclose()

    async def aclose(self) -> None:
        await self._sender.aclose()
        await self._receiver.aclose()

    def __repr__(self) -> str:
        return (
            f"LossyConn(name={self.name!r}, state={self._state.value}, "
            f"pending={len(self._buffer)}, params={self.params!r})"
        )


def channel(
    loss_rate: float = 0.0,
    delay_avg: Duration = 0.0,
    delay_stddev: Duration = 0.0,
    *,
    capacity: int = DEFAULT_CAPACITY,
    delay_distribution: str = "folded_normal",
    seed: Optional[int] = None,
    rngs: Optional[Sequence[random.Random]] = None,
) -> Tuple[LossyConn, LossyConn]:
    params = LinkParams(
        loss_rate=float(loss_rate),
        delay_avg=_as_seconds(delay_avg),
        delay_stddev=_as_seconds(delay_stddev),
        delay_distribution=delay_distribution,
        capacity=capacity,
    )
    return channel_from_params(params, seed=seed, rngs=rngs)


def channel_from_params(
    params: LinkParams,
    seed: Optional[int] = None,
    rngs: Optional[Sequence[random.Random]] = None,
) -> Tuple[LossyConn, LossyConn]:
    if rngs is None:
        rngs = derive_rngs(seed, count=2)
    elif len(rngs) != 2:
        raise ValueError(f"Expected one random generator per direction, got {len(rngs)}")
    if rngs[0] is rngs[1]:
        raise ValueError("Each direction needs its own random generator")

    a2b, b_from_a = trio.open_memory_channel(params.capacity)
    b2a, a_from_b = trio.open_memory_channel(params.capacity)
    return (
        LossyConn(a2b, a_from_b, params, rng=rngs[0], name="a"),
        LossyConn(b2a, b_from_a, params, rng=rngs[1], name="b"),
    )


def _as_seconds(value: Duration) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)
