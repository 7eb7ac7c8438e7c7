"""Load bootstrap configuration from environment variables."""

from __future__ import annotations

import os
from typing import Mapping

from openclaw_setup.models.config import BootstrapConfig

# Field -> env var names, first non-empty wins. The MOLTBOT_* names predate
# the OpenClaw rename and are still honoured.
_FIELD_MAP: dict[str, tuple[str, ...]] = {
    "listen_addr": ("SETUP_LISTEN_ADDR",),
    "compose_dir": ("OPENCLAW_COMPOSE_DIR", "MOLTBOT_COMPOSE_DIR"),
    "container_name": ("OPENCLAW_CONTAINER_NAME", "MOLTBOT_CONTAINER_NAME"),
    "static_dir": ("SETUP_STATIC_DIR",),
    "log_level": ("SETUP_LOG_LEVEL",),
}


def load_bootstrap_config(environ: Mapping[str, str] | None = None) -> BootstrapConfig:
    """Build BootstrapConfig from env vars with defaults."""
    env = os.environ if environ is None else environ
    overrides: dict[str, str] = {}
    for field_name, env_keys in _FIELD_MAP.items():
        for env_key in env_keys:
            val = env.get(env_key, "")
            if val:
                overrides[field_name] = val
                break
    return BootstrapConfig(**overrides)
