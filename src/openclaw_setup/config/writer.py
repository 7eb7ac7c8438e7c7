"""Config writer — materializes openclaw.json and its companion .env.

The whole document is built in memory before anything touches the disk, so
a validation or serialization failure never leaves a half-written file.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from openclaw_setup.config.envfile import GATEWAY_TOKEN_KEY, write_private_file
from openclaw_setup.config.providers import (
    LOCAL_PROVIDER_ID,
    normalize_provider_id,
    resolve_credential_key,
    static_catalog,
)
from openclaw_setup.errors import PersistenceError, ValidationError
from openclaw_setup.models.gateway import (
    AgentDefaults,
    AgentsSection,
    CatalogModel,
    GatewayAuth,
    GatewayConfig,
    GatewaySection,
    ModelProvider,
    ModelRef,
    ModelsSection,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "openclaw.json"
ENV_FILENAME = ".env"

_TOKEN_BYTES = 24

# Catalog defaults for a self-hosted model we know nothing about.
_LOCAL_CONTEXT_WINDOW = 128000
_LOCAL_MAX_TOKENS = 8192


@dataclass
class ProviderKey:
    """A credential line destined for the config .env."""

    key: str
    value: str


def generate_gateway_token() -> str:
    """Return a fresh gateway token: 24 random bytes, hex-encoded."""
    return secrets.token_hex(_TOKEN_BYTES)


def _require(value: str, what: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{what} is required")
    return value


def _local_models_section(model: str, base_url: str) -> ModelsSection:
    base = base_url.strip().rstrip("/")
    if not base.endswith("/v1"):
        base = f"{base}/v1"
    model_id = model.removeprefix(f"{LOCAL_PROVIDER_ID}/")
    return ModelsSection(providers={
        LOCAL_PROVIDER_ID: ModelProvider(
            base_url=base,
            api="openai-completions",
            models=[CatalogModel(
                id=model_id,
                name=model_id,
                context_window=_LOCAL_CONTEXT_WINDOW,
                max_tokens=_LOCAL_MAX_TOKENS,
            )],
        ),
    })


def _models_section(provider_id: str, env_key: str, model: str, base_url: str) -> ModelsSection | None:
    """Return the models block for providers the gateway cannot discover."""
    if provider_id == LOCAL_PROVIDER_ID:
        return _local_models_section(model, base_url) if base_url.strip() else None

    catalog = static_catalog(provider_id)
    if catalog is None:
        return None
    env_key = env_key or resolve_credential_key(provider_id)
    return ModelsSection(providers={
        provider_id: ModelProvider(
            # Reference the env var so the key itself never lands in the JSON.
            api_key=f"${{{env_key}}}",
            base_url=catalog["base_url"],
            api=catalog["api"],
            models=[
                CatalogModel(
                    id=entry["id"],
                    name=entry["name"],
                    reasoning=entry["reasoning"],
                    input=list(entry["input"]),
                    context_window=entry["context_window"],
                    max_tokens=entry["max_tokens"],
                )
                for entry in catalog["models"]
            ],
        ),
    })


def build_gateway_config(
    model: str,
    gateway_token: str,
    provider_id: str = "",
    provider_env_key: str = "",
    base_url: str = "",
) -> GatewayConfig:
    """Build the fixed-shape gateway document for *model*."""
    model = _require(model, "model")
    gateway_token = _require(gateway_token, "gateway token")
    provider_id = normalize_provider_id(provider_id)

    return GatewayConfig(
        gateway=GatewaySection(auth=GatewayAuth(token=gateway_token)),
        agents=AgentsSection(defaults=AgentDefaults(model=ModelRef(primary=model))),
        models=_models_section(provider_id, provider_env_key.strip(), model, base_url) if provider_id else None,
    )


def _write_config(config_dir: str, cfg: GatewayConfig, env_lines: list[str] | None) -> Path:
    payload = cfg.to_json() + "\n"
    directory = Path(config_dir)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PersistenceError(f"create config dir: {e}") from e

    config_path = directory / CONFIG_FILENAME
    try:
        write_private_file(config_path, payload)
    except OSError as e:
        raise PersistenceError(f"write config: {e}") from e

    if env_lines is not None:
        try:
            write_private_file(directory / ENV_FILENAME, "\n".join(env_lines) + "\n")
        except OSError as e:
            raise PersistenceError(f"write env: {e}") from e

    logger.info("Wrote %s (env=%s)", config_path, env_lines is not None)
    return config_path


def materialize(
    config_dir: str,
    model: str,
    gateway_token: str,
    provider_id: str = "",
    provider_env_key: str = "",
    provider_api_key: str = "",
    include_env: bool = False,
    base_url: str = "",
) -> Path:
    """Write openclaw.json for a single provider, optionally with a fresh .env.

    The .env written here replaces any previous file at that path; it is the
    config directory's own env file, not the deployment's.
    """
    config_dir = _require(config_dir, "config dir")
    cfg = build_gateway_config(model, gateway_token, provider_id, provider_env_key, base_url)

    env_lines = None
    if include_env:
        env_lines = [f"{GATEWAY_TOKEN_KEY}={cfg.gateway.auth.token}"]
        if provider_env_key.strip() and provider_api_key.strip():
            env_lines.append(f"{provider_env_key.strip()}={provider_api_key.strip()}")

    return _write_config(config_dir, cfg, env_lines)


def write_config_and_env(
    config_dir: str,
    model: str,
    gateway_token: str,
    providers: Iterable[ProviderKey] = (),
) -> Path:
    """Write openclaw.json and a .env holding the token and every credential pair.

    Pairs with an empty key or value are skipped.
    """
    config_dir = _require(config_dir, "config dir")
    cfg = build_gateway_config(model, gateway_token)

    env_lines = [f"{GATEWAY_TOKEN_KEY}={cfg.gateway.auth.token}"]
    for provider in providers:
        key = provider.key.strip()
        value = provider.value.strip()
        if not key or not value:
            continue
        env_lines.append(f"{key}={value}")

    return _write_config(config_dir, cfg, env_lines)
