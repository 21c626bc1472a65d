from __future__ import annotations

from pathlib import Path

import pytest

from lossylink.cli.validate import validate_config
from lossylink.runtime.config import load_link_config, parse_link_config


def test_load_link_config_parses_delay_and_probe(tmp_path: Path) -> None:
    cfg_path = tmp_path / "link.yaml"
    cfg_path.write_text(
        """
link:
  loss_rate: 0.25
  delay:
    avg_ms: 40
    stddev_ms: 10
    distribution: truncated_normal
  capacity: 128
seed: 9
probe:
  count: 300
  direction: Both
""".strip(),
        encoding="utf-8",
    )
    cfg = load_link_config(cfg_path)

    assert cfg.params.loss_rate == 0.25
    assert cfg.params.delay_avg == pytest.approx(0.04)
    assert cfg.params.delay_stddev == pytest.approx(0.01)
    assert cfg.params.delay_distribution == "truncated_normal"
    assert cfg.params.capacity == 128
    assert cfg.seed == 9
    assert cfg.probe.count == 300
    assert cfg.probe.direction == "both"
    assert cfg.probe.realtime is False


def test_empty_config_uses_lossless_defaults(tmp_path: Path) -> None:
    cfg_path = tmp_path / "empty.yaml"
    cfg_path.write_text("", encoding="utf-8")
    cfg = load_link_config(cfg_path)

    assert cfg.params.loss_rate == 0.0
    assert cfg.params.delay_avg == 0.0
    assert cfg.params.delay_distribution == "folded_normal"
    assert cfg.seed is None
    assert cfg.probe.direction == "a_to_b"


def test_seconds_and_milliseconds_are_exclusive() -> None:
    with pytest.raises(ValueError, match="mutually exclusive"):
        parse_link_config({"link": {"delay": {"avg": 0.1, "avg_ms": 100}}})


def test_invalid_values_are_rejected_not_clamped() -> None:
    with pytest.raises(ValueError):
        parse_link_config({"link": {"loss_rate": 1.2}})
    with pytest.raises(ValueError):
        parse_link_config({"probe": {"direction": "sideways"}})


def test_validate_config_reports_problems() -> None:
    assert validate_config({"link": {"loss_rate": 0.1, "delay": {"avg": 0.01}}}) == []
    assert validate_config({"link": 5}) == ["'link' must be a dict"]
    assert validate_config({"link": {"delay": [1, 2]}}) == ["link.delay must be a dict"]
    assert validate_config([]) == ["config must be a mapping"]

    errors = validate_config({"link": {"delay": {"stddev": -1}}})
    assert len(errors) == 1
    assert "delay_stddev" in errors[0]


def test_fractional_integers_are_rejected_not_truncated() -> None:
    with pytest.raises(ValueError, match="link.capacity"):
        parse_link_config({"link": {"capacity": 2.5}})
    with pytest.raises(ValueError, match="probe.count"):
        parse_link_config({"probe": {"count": 7.9}})
    with pytest.raises(ValueError, match="seed"):
        parse_link_config({"seed": "abc"})

    cfg = parse_link_config({"link": {"capacity": 64.0}, "probe": {"count": 12}})
    assert cfg.params.capacity == 64
    assert cfg.probe.count == 12


def test_overrides_replace_only_given_fields() -> None:
    cfg = parse_link_config({"link": {"loss_rate": 0.2}, "seed": 3, "probe": {"count": 40}})

    same = cfg.with_overrides()
    assert same == cfg

    changed = cfg.with_overrides(seed=11, count=5, realtime=True)
    assert changed.seed == 11
    assert changed.probe.count == 5
    assert changed.probe.realtime is True
    assert changed.params == cfg.params
    assert cfg.probe.count == 40
