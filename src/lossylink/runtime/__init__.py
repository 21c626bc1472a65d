"""Config loading and probe runs."""

from lossylink.runtime.config import (
    LinkConfig,
    ProbeConfig,
    load_link_config,
    parse_link_config,
    read_link_profile,
)
from lossylink.runtime.probe import run_probe

__all__ = [
    "LinkConfig",
    "ProbeConfig",
    "load_link_config",
    "parse_link_config",
    "read_link_profile",
    "run_probe",
]
