from __future__ import annotations

import json
from pathlib import Path

from lossylink.cli.main import main


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "link.yaml"
    path.write_text(text.strip(), encoding="utf-8")
    return path


def test_cli_probe_prints_and_dumps_result(tmp_path: Path, capsys) -> None:
    cfg = _write(
        tmp_path,
        """
link:
  loss_rate: 0.1
  delay:
    avg_ms: 20
    stddev_ms: 5
seed: 1
probe:
  count: 1000
""",
    )
    out = tmp_path / "results" / "probe.json"

    assert main(["probe", "--config", str(cfg), "--count", "50", "--output", str(out)]) == 0

    printed = json.loads(capsys.readouterr().out)
    dumped = json.loads(out.read_text(encoding="utf-8"))
    assert printed == dumped
    assert printed["count"] == 50
    assert printed["seed"] == 1
    assert printed["params"]["delay_avg"] == 0.02


def test_cli_probe_seed_override(tmp_path: Path, capsys) -> None:
    cfg = _write(tmp_path, "link:\n  loss_rate: 0.5\nprobe:\n  count: 20\n")

    assert main(["probe", "--config", str(cfg), "--seed", "7"]) == 0
    assert json.loads(capsys.readouterr().out)["seed"] == 7


def test_cli_validate_ok_and_error(tmp_path: Path, capsys) -> None:
    good = _write(tmp_path, "link:\n  loss_rate: 0.3\n")
    assert main(["validate", "--config", str(good)]) == 0
    assert json.loads(capsys.readouterr().out) == {"ok": True}

    bad = tmp_path / "bad.yaml"
    bad.write_text("link:\n  loss_rate: 3\n", encoding="utf-8")
    assert main(["validate", "--config", str(bad)]) == 1
    report = json.loads(capsys.readouterr().out)
    assert report["ok"] is False
    assert "loss_rate" in report["errors"][0]
