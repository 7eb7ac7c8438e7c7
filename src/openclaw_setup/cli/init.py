"""First-run initialisation from an existing deployment .env.

Reads PROVIDER / MODEL / API_KEY / BASE_URL from ``{compose_dir}/.env``,
writes ``data/conf/openclaw.json`` (+ its .env) and records the generated
gateway token back into the deployment .env.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from openclaw_setup.config.envfile import read_env_file, upsert_gateway_token
from openclaw_setup.config.providers import LOCAL_PROVIDER_ID, resolve_credential_key
from openclaw_setup.config.writer import generate_gateway_token, materialize
from openclaw_setup.errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class InitResult:
    config_path: Path
    env_path: Path
    provider: str
    model: str


def resolve_compose_dir(explicit: str | None) -> Path:
    """Use *explicit* when given, otherwise the current working directory."""
    if explicit and explicit.strip():
        return Path(explicit)
    return Path(os.getcwd()).resolve()


def run_init(compose_dir: str | Path) -> InitResult:
    compose_dir = Path(compose_dir)
    env_path = compose_dir / ".env"
    env = read_env_file(env_path)

    provider = env.get("PROVIDER", "").lower()
    model = env.get("MODEL", "")
    api_key = env.get("API_KEY", "")
    base_url = env.get("BASE_URL", "")

    if not provider or not model:
        raise ValidationError(".env must include PROVIDER and MODEL")
    if provider != LOCAL_PROVIDER_ID and not api_key:
        raise ValidationError(f".env must include API_KEY for provider {provider}")
    if provider == LOCAL_PROVIDER_ID and not base_url:
        raise ValidationError(f".env must include BASE_URL for provider {LOCAL_PROVIDER_ID}")

    env_key = resolve_credential_key(provider)
    token = generate_gateway_token()

    config_path = materialize(
        str(compose_dir / "data" / "conf"),
        model,
        token,
        provider_id=provider,
        provider_env_key=env_key,
        provider_api_key=api_key,
        include_env=True,
        base_url=base_url,
    )
    upsert_gateway_token(env_path, token)

    logger.info("Initialised %s for provider=%s model=%s", config_path, provider, model)
    return InitResult(config_path=config_path, env_path=env_path, provider=provider, model=model)
