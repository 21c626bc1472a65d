from __future__ import annotations

from typing import Any, Dict

from lossylink.runtime.config import parse_link_config


def validate_config(cfg: Dict[str, Any]) -> list[str]:
    errors: list[str] = []

    if not isinstance(cfg, dict):
        return ["config must be a mapping"]

    link = cfg.get("link", {})
    if link is not None and not isinstance(link, dict):
        errors.append("'link' must be a dict")
    elif isinstance(link, dict):
        delay = link.get("delay", {})
        if delay is not None and not isinstance(delay, dict):
            errors.append("link.delay must be a dict")

    probe = cfg.get("probe", {})
    if probe is not None and not isinstance(probe, dict):
        errors.append("'probe' must be a dict")

    if errors:
        return errors

    try:
        parse_link_config(cfg)
    except (TypeError, ValueError) as exc:
        errors.append(str(exc))
    return errors
