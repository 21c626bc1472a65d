"""Lossy link simulation engine."""

from lossylink.core.conn import LossyConn, channel, channel_from_params, sample_delay
from lossylink.core.delay_buffer import DelayBuffer, WakeTimer
from lossylink.core.types import ConnState, LinkParams, LinkStats, QueuedItem

__all__ = [
    "ConnState",
    "DelayBuffer",
    "LinkParams",
    "LinkStats",
    "LossyConn",
    "QueuedItem",
    "WakeTimer",
    "channel",
    "channel_from_params",
    "sample_delay",
]
