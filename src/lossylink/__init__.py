"""In-process duplex channel with simulated packet loss and jitter."""

from lossylink.core import ConnState, LinkParams, LinkStats, LossyConn, channel, channel_from_params

__all__ = [
    "ConnState",
    "LinkParams",
    "LinkStats",
    "LossyConn",
    "channel",
    "channel_from_params",
]

__version__ = "0.1.0"
