"""Model listing route — proxies a provider's catalog."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from openclaw_setup.errors import (
    ProviderError,
    TransportError,
    UnsupportedProviderError,
    ValidationError,
)
from openclaw_setup.models.api import ModelsRequest, ModelsResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["models"])


def _respond(status_code: int, body: ModelsResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.post("/models")
async def list_models(request: Request) -> JSONResponse:
    """Return the model ids a provider offers for the given API key."""
    try:
        body = ModelsRequest.model_validate_json(await request.body())
    except PydanticValidationError:
        return _respond(400, ModelsResponse(message="invalid json"))

    try:
        result = await request.app.state.model_fetcher.fetch(body.provider, body.api_key)
    except (ValidationError, UnsupportedProviderError, ProviderError) as e:
        return _respond(400, ModelsResponse(message=e.message))
    except TransportError as e:
        logger.warning("Model listing for %s failed: %s", body.provider, e.message)
        return _respond(502, ModelsResponse(message=e.message))

    return _respond(200, ModelsResponse(models=result.models, message=result.message or None))
