from __future__ import annotations

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import trio
import trio.testing

from lossylink.core.conn import LossyConn, channel_from_params
from lossylink.core.logging import JsonlLogger
from lossylink.runtime.config import LinkConfig

log = logging.getLogger("lossylink.probe")


def run_probe(
    config: LinkConfig,
    trace: str | Path | None = None,
    count: Optional[int] = None,
) -> Dict[str, Any]:
    """Push sequence-numbered packets through a channel pair and summarize.

    Runs on a virtual clock unless ``config.probe.realtime`` is set, so the
    configured delays cost no wall time.
    """
    n = int(config.probe.count if count is None else count)
    if n < 0:
        raise ValueError(f"count must be >= 0, got {n}")
    clock = None if config.probe.realtime else trio.testing.MockClock(autojump_threshold=0)
    log.info(
        "probe start: count=%s direction=%s params=%s seed=%s",
        n,
        config.probe.direction,
        config.params,
        config.seed,
    )
    with JsonlLogger(trace) as tracer:
        directions = trio.run(_probe, config, n, tracer, clock=clock)
    return {
        "params": asdict(config.params),
        "seed": config.seed,
        "count": n,
        "directions": directions,
    }


async def _probe(config: LinkConfig, count: int, tracer: JsonlLogger) -> Dict[str, Any]:
    conn_a, conn_b = channel_from_params(config.params, seed=config.seed)
    legs: List[Tuple[str, LossyConn, LossyConn]] = []
    if config.probe.direction in {"a_to_b", "both"}:
        legs.append(("a_to_b", conn_a, conn_b))
    if config.probe.direction in {"b_to_a", "both"}:
        legs.append(("b_to_a", conn_b, conn_a))

    results: Dict[str, Any] = {}
    async with conn_a, conn_b:
        async with trio.open_nursery() as nursery:
            for name, tx, rx in legs:
                nursery.start_soon(_run_leg, name, tx, rx, count, tracer, results)
    return results


async def _run_leg(
    name: str,
    tx: LossyConn,
    rx: LossyConn,
    count: int,
    tracer: JsonlLogger,
    results: Dict[str, Any],
) -> None:
    latencies: List[float] = []
    reordered = 0
    highest = -1

    async def pump() -> None:
        for seq in range(count):
            await tx.send((seq, trio.current_time()))
        await tx.close()

    async with trio.open_nursery() as nursery:
        nursery.start_soon(pump)
        async for seq, sent_at in rx:
            latency = trio.current_time() - sent_at
            latencies.append(latency)
            if seq < highest:
                reordered += 1
            highest = max(highest, seq)
            tracer.log("deliver", direction=name, seq=seq, latency=latency)

    delivered = len(latencies)
    results[name] = {
        "sent": count,
        "delivered": delivered,
        "dropped": rx.stats.dropped,
        "delivery_ratio": (delivered / count) if count else 0.0,
        "reordered": reordered,
        "latency_mean": (sum(latencies) / delivered) if delivered else 0.0,
        "latency_max": max(latencies, default=0.0),
        "stats": {"sender": tx.stats.as_dict(), "receiver": rx.stats.as_dict()},
    }
    log.info(
        "probe %s: delivered=%s/%s reordered=%s",
        name,
        delivered,
        count,
        reordered,
    )
