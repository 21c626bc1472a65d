from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from lossylink.cli.validate import validate_config
from lossylink.runtime.config import load_link_config, read_link_profile
from lossylink.runtime.probe import run_probe


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lossylink", description="Simulated lossy link probing tools"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_probe = sub.add_parser("probe", help="Push numbered packets through a simulated link")
    p_probe.add_argument("--config", required=True, help="YAML link profile.")
    p_probe.add_argument("--count", type=int, default=None, help="Override probe.count.")
    p_probe.add_argument("--seed", type=int, default=None, help="Override the profile seed.")
    p_probe.add_argument("--trace", default=None, help="Write one JSON line per delivery.")
    p_probe.add_argument("--output", default=None, help="Also dump the result to this file.")
    p_probe.add_argument(
        "--realtime", action="store_true", help="Run on the wall clock instead of a virtual one."
    )

    p_validate = sub.add_parser("validate", help="Validate a link profile")
    p_validate.add_argument("--config", required=True)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "probe":
        config = load_link_config(args.config).with_overrides(
            seed=args.seed, count=args.count, realtime=args.realtime
        )
        result = run_probe(config, trace=args.trace)
        text = json.dumps(result, indent=2, ensure_ascii=False, sort_keys=True)
        if args.output:
            out = Path(args.output)
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_text(text + "\n", encoding="utf-8")
        print(text)
        return 0

    if args.cmd == "validate":
        cfg = read_link_profile(args.config)
        errors = validate_config(cfg)
        if errors:
            print(json.dumps({"ok": False, "errors": errors}, ensure_ascii=False, indent=2))
            return 1
        print(json.dumps({"ok": True}, ensure_ascii=False, indent=2))
        return 0

    return 2


if __name__ == "__main__":
    sys.exit(main())
