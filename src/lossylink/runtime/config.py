from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from lossylink.core.types import DEFAULT_CAPACITY, LinkParams

DIRECTIONS = ("a_to_b", "b_to_a", "both")


@dataclass(frozen=True)
class ProbeConfig:
    count: int = 1000
    direction: str = "a_to_b"
    realtime: bool = False

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"probe.count must be >= 0, got {self.count}")
        if self.direction not in DIRECTIONS:
            raise ValueError(f"Unsupported probe direction: {self.direction}")


@dataclass(frozen=True)
class LinkConfig:
    params: LinkParams = field(default_factory=LinkParams)
    seed: Optional[int] = None
    probe: ProbeConfig = field(default_factory=ProbeConfig)

    def with_overrides(
        self,
        seed: Optional[int] = None,
        count: Optional[int] = None,
        realtime: bool = False,
    ) -> "LinkConfig":
        probe = self.probe
        if count is not None:
            probe = replace(probe, count=count)
        if realtime:
            probe = replace(probe, realtime=True)
        return replace(self, seed=self.seed if seed is None else seed, probe=probe)


def read_link_profile(path: str | Path) -> Dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_link_config(path: str | Path) -> LinkConfig:
    return parse_link_config(read_link_profile(path))


def parse_link_config(raw: Dict[str, Any]) -> LinkConfig:
    link = dict(raw.get("link") or {})
    delay = dict(link.get("delay") or {})
    probe = dict(raw.get("probe") or {})

    params = LinkParams(
        loss_rate=float(link.get("loss_rate", 0.0)),
        delay_avg=_seconds(delay, "avg"),
        delay_stddev=_seconds(delay, "stddev"),
        delay_distribution=str(delay.get("distribution", "folded_normal")),
        capacity=_integer(link.get("capacity", DEFAULT_CAPACITY), "link.capacity"),
    )
    seed = raw.get("seed")
    return LinkConfig(
        params=params,
        seed=None if seed is None else _integer(seed, "seed"),
        probe=ProbeConfig(
            count=_integer(probe.get("count", 1000), "probe.count"),
            direction=str(probe.get("direction", "a_to_b")).lower(),
            realtime=bool(probe.get("realtime", False)),
        ),
    )


def _seconds(delay: Dict[str, Any], key: str) -> float:
    if key in delay and f"{key}_ms" in delay:
        raise ValueError(f"delay.{key} and delay.{key}_ms are mutually exclusive")
    if f"{key}_ms" in delay:
        return float(delay[f"{key}_ms"]) / 1000.0
    return float(delay.get(key, 0.0))


def _integer(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return value
