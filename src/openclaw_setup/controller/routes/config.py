"""Configuration routes — save gateway config and restart the stack."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from openclaw_setup.config.envfile import upsert_gateway_token
from openclaw_setup.config.providers import list_providers
from openclaw_setup.config.writer import ProviderKey, generate_gateway_token, write_config_and_env
from openclaw_setup.errors import PersistenceError, ValidationError
from openclaw_setup.models.api import ConfigRequest, ConfigResponse
from openclaw_setup.models.config import BootstrapConfig

logger = logging.getLogger(__name__)
router = APIRouter(tags=["config"])

MSG_SAVED = "configuration saved"
MSG_RESTART_FAILED = "configuration saved, but restart failed"


def _respond(status_code: int, body: ConfigResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


@router.post("/config")
async def save_config(request: Request) -> JSONResponse:
    """Write openclaw.json + .env, then restart the managed stack."""
    cfg: BootstrapConfig = request.app.state.config

    try:
        body = ConfigRequest.model_validate_json(await request.body())
    except PydanticValidationError:
        return _respond(400, ConfigResponse(ok=False, message="invalid json"))

    model = body.model.strip()
    if not model:
        return _respond(400, ConfigResponse(ok=False, message="model is required"))

    token = body.gateway_token.strip() or generate_gateway_token()

    try:
        write_config_and_env(
            cfg.config_dir,
            model,
            token,
            [ProviderKey(key=p.key, value=p.value) for p in body.providers],
        )
        # Keep compose's copy of the token in step with openclaw.json.
        compose_env = Path(cfg.compose_dir) / ".env" if cfg.compose_dir else None
        if compose_env is not None and compose_env.is_file():
            upsert_gateway_token(compose_env, token)
    except ValidationError as e:
        return _respond(400, ConfigResponse(ok=False, message=e.message))
    except PersistenceError as e:
        logger.error("Saving config failed: %s", e.message)
        return _respond(500, ConfigResponse(ok=False, message=e.message))

    outcome = await request.app.state.restarter.restart(cfg.compose_dir)
    if not outcome.ok:
        return _respond(200, ConfigResponse(
            ok=False,
            restarted=outcome.attempted,
            message=MSG_RESTART_FAILED,
            restart_error=outcome.error,
        ))
    return _respond(200, ConfigResponse(ok=True, restarted=outcome.attempted, message=MSG_SAVED))


@router.get("/providers")
async def get_providers() -> dict[str, list]:
    """Return the providers the setup UI can offer."""
    return {"providers": list_providers()}
