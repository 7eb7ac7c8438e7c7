"""Model listing — queries a provider's catalog and normalizes the answer.

Each provider in the registry is tagged with a ``FetchStrategy``; the
dispatcher looks the strategy up in ``_STRATEGIES`` and runs it against an
``httpx.AsyncClient``. Pass a custom ``transport`` (e.g.
``httpx.MockTransport``) to exercise every strategy without the network.

Error surface::

    ProviderError   the provider answered, but with an error status or junk
    TransportError  the provider could not be reached (timeout, DNS, reset)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable

import anthropic
import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from openclaw_setup.config.providers import FetchStrategy, ProviderConfig, get_provider
from openclaw_setup.errors import (
    ProviderError,
    TransportError,
    UnsupportedProviderError,
    ValidationError,
)

logger = logging.getLogger(__name__)

FETCH_TIMEOUT_SECONDS = 15.0
MANUAL_CATALOG_MESSAGE = (
    "This provider does not support fetching models automatically; "
    "please enter the model manually."
)


@dataclass
class ModelFetchResult:
    """Model ids in provider order, or none plus an explanation."""

    models: list[str] = field(default_factory=list)
    message: str = ""


# ---------------------------------------------------------------------------
# Response shapes
# ---------------------------------------------------------------------------


class _IdItem(BaseModel):
    id: str | None = None


class _IdList(BaseModel):
    data: list[_IdItem] = []


class _NameItem(BaseModel):
    name: str | None = None


class _GeminiList(BaseModel):
    models: list[_NameItem] = []


def _non_empty(ids: list[str | None]) -> list[str]:
    return [i for i in ids if i and i.strip()]


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

Strategy = Callable[[httpx.AsyncClient, ProviderConfig, str], Awaitable[ModelFetchResult]]


async def _get(client: httpx.AsyncClient, url: str, **kwargs) -> httpx.Response:
    try:
        response = await client.get(url, **kwargs)
    except httpx.TimeoutException as e:
        raise TransportError(f"request to {url} timed out") from e
    except httpx.HTTPError as e:
        raise TransportError(f"request to {url} failed: {e}") from e
    if response.status_code >= 400:
        raise ProviderError(response.text.strip())
    return response


async def _fetch_openai_compatible(
    client: httpx.AsyncClient, provider: ProviderConfig, api_key: str,
) -> ModelFetchResult:
    response = await _get(
        client, provider["models_url"], headers={"Authorization": f"Bearer {api_key}"},
    )
    try:
        payload = _IdList.model_validate_json(response.content)
    except PydanticValidationError as e:
        raise ProviderError(f"unexpected response from {provider['name']}") from e
    return ModelFetchResult(models=_non_empty([item.id for item in payload.data]))


async def _fetch_anthropic(
    client: httpx.AsyncClient, provider: ProviderConfig, api_key: str,
) -> ModelFetchResult:
    # The SDK sends x-api-key and anthropic-version itself; it shares our
    # client so the timeout and transport apply, and retries are disabled.
    # base_url is pinned so ANTHROPIC_BASE_URL in the environment is ignored.
    endpoint = httpx.URL(provider["models_url"])
    sdk = anthropic.AsyncAnthropic(
        api_key=api_key,
        base_url=f"{endpoint.scheme}://{endpoint.netloc.decode()}",
        max_retries=0,
        timeout=client.timeout.read or FETCH_TIMEOUT_SECONDS,
        http_client=client,
    )
    try:
        # Raw response: the body is decoded below, not by the SDK's page model.
        raw = await sdk.models.with_raw_response.list()
    except anthropic.APIStatusError as e:
        raise ProviderError(e.response.text.strip()) from e
    except anthropic.APITimeoutError as e:
        raise TransportError(f"request to {provider['models_url']} timed out") from e
    except anthropic.APIConnectionError as e:
        raise TransportError(f"request to {provider['models_url']} failed: {e}") from e
    try:
        payload = _IdList.model_validate_json(raw.content)
    except PydanticValidationError as e:
        raise ProviderError(f"unexpected response from {provider['name']}") from e
    return ModelFetchResult(models=_non_empty([item.id for item in payload.data]))


async def _fetch_gemini(
    client: httpx.AsyncClient, provider: ProviderConfig, api_key: str,
) -> ModelFetchResult:
    # Gemini takes the key as a query parameter, not a header.
    response = await _get(client, provider["models_url"], params={"key": api_key})
    try:
        payload = _GeminiList.model_validate_json(response.content)
    except PydanticValidationError as e:
        raise ProviderError(f"unexpected response from {provider['name']}") from e
    names = [(item.name or "").strip().removeprefix("models/") for item in payload.models]
    return ModelFetchResult(models=_non_empty(names))


async def _manual_catalog(
    client: httpx.AsyncClient, provider: ProviderConfig, api_key: str,
) -> ModelFetchResult:
    return ModelFetchResult(message=MANUAL_CATALOG_MESSAGE)


_STRATEGIES: dict[FetchStrategy, Strategy] = {
    FetchStrategy.OPENAI_COMPATIBLE: _fetch_openai_compatible,
    FetchStrategy.ANTHROPIC: _fetch_anthropic,
    FetchStrategy.GEMINI: _fetch_gemini,
    FetchStrategy.UNSUPPORTED: _manual_catalog,
}


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


class ModelFetchDispatcher:
    """Lists a provider's models with a single bounded-time attempt.

    Usage::

        dispatcher = ModelFetchDispatcher()
        result = await dispatcher.fetch("openai", "sk-...")
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = FETCH_TIMEOUT_SECONDS,
    ) -> None:
        self._transport = transport
        self._timeout = timeout

    async def fetch(self, provider_id: str, api_key: str) -> ModelFetchResult:
        provider_id = (provider_id or "").strip()
        api_key = (api_key or "").strip()
        if not provider_id or not api_key:
            raise ValidationError("provider and apiKey required")

        provider = get_provider(provider_id)
        strategy = provider["fetch_strategy"] if provider else None
        if provider is None or strategy is None:
            raise UnsupportedProviderError(provider_id)

        logger.info("Listing models for provider %s (%s)", provider_id.lower(), strategy.value)
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            result = await _STRATEGIES[strategy](client, provider, api_key)
        logger.info("Provider %s returned %d models", provider_id.lower(), len(result.models))
        return result
