"""Provider registry.

Maps each provider id to the env var its credential lives in, the strategy
used to list its models, and the metadata the setup UI shows. Providers
whose catalog cannot be discovered but is known ahead of time also carry a
static catalog that is written into openclaw.json.
"""

from __future__ import annotations

from enum import Enum
from typing import TypedDict

from openclaw_setup.errors import UnsupportedProviderError

LOCAL_PROVIDER_ID = "ollama"


class FetchStrategy(str, Enum):
    """How a provider's model list is obtained."""

    OPENAI_COMPATIBLE = "openai-compatible"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    UNSUPPORTED = "unsupported"  # catalog must be entered by hand


class ModelEntry(TypedDict):
    """A hand-curated catalog entry."""
    id: str
    name: str
    reasoning: bool
    input: list[str]
    context_window: int
    max_tokens: int


class StaticCatalog(TypedDict):
    base_url: str
    api: str
    models: list[ModelEntry]


class ProviderConfig(TypedDict):
    """Configuration for an AI provider."""
    name: str
    group: str  # "mainstream" | "domestic" | "local"
    env_var_key: str | None  # None: not usable as the gateway's provider
    fetch_strategy: FetchStrategy | None  # None: model listing not offered
    models_url: str
    default_model: str


PROVIDER_REGISTRY: dict[str, ProviderConfig] = {
    "openai": {
        "name": "OpenAI",
        "group": "mainstream",
        "env_var_key": "OPENAI_API_KEY",
        "fetch_strategy": FetchStrategy.OPENAI_COMPATIBLE,
        "models_url": "https://api.openai.com/v1/models",
        "default_model": "openai/gpt-4o-mini",
    },
    "anthropic": {
        "name": "Anthropic",
        "group": "mainstream",
        "env_var_key": "ANTHROPIC_API_KEY",
        "fetch_strategy": FetchStrategy.ANTHROPIC,
        "models_url": "https://api.anthropic.com/v1/models",
        "default_model": "anthropic/claude-3-7-sonnet",
    },
    "gemini": {
        "name": "Gemini",
        "group": "mainstream",
        "env_var_key": "GEMINI_API_KEY",
        "fetch_strategy": FetchStrategy.GEMINI,
        "models_url": "https://generativelanguage.googleapis.com/v1beta/models",
        "default_model": "gemini/gemini-1.5-pro",
    },
    "groq": {
        "name": "Groq",
        "group": "mainstream",
        "env_var_key": "GROQ_API_KEY",
        "fetch_strategy": FetchStrategy.OPENAI_COMPATIBLE,
        "models_url": "https://api.groq.com/openai/v1/models",
        "default_model": "groq/llama-3.1-70b-versatile",
    },
    "mistral": {
        "name": "Mistral",
        "group": "mainstream",
        "env_var_key": "MISTRAL_API_KEY",
        "fetch_strategy": FetchStrategy.OPENAI_COMPATIBLE,
        "models_url": "https://api.mistral.ai/v1/models",
        "default_model": "mistral/large-latest",
    },
    "cohere": {
        "name": "Cohere",
        "group": "mainstream",
        "env_var_key": "COHERE_API_KEY",
        "fetch_strategy": FetchStrategy.UNSUPPORTED,
        "models_url": "",
        "default_model": "cohere/command-r-plus",
    },
    "minimax": {
        "name": "MiniMax",
        "group": "domestic",
        "env_var_key": "MINIMAX_API_KEY",
        "fetch_strategy": FetchStrategy.UNSUPPORTED,
        "models_url": "",
        "default_model": "minimax/MiniMax-M2.1",
    },
    "deepseek": {
        "name": "DeepSeek",
        "group": "domestic",
        "env_var_key": "DEEPSEEK_API_KEY",
        "fetch_strategy": FetchStrategy.OPENAI_COMPATIBLE,
        "models_url": "https://api.deepseek.com/v1/models",
        "default_model": "deepseek/deepseek-chat",
    },
    "moonshot": {
        "name": "Moonshot / Kimi",
        "group": "domestic",
        "env_var_key": "MOONSHOT_API_KEY",
        "fetch_strategy": FetchStrategy.OPENAI_COMPATIBLE,
        "models_url": "https://api.moonshot.cn/v1/models",
        "default_model": "moonshot/kimi-k2.5",
    },
    "qwen": {
        "name": "Qwen",
        "group": "domestic",
        "env_var_key": "QWEN_API_KEY",
        "fetch_strategy": FetchStrategy.OPENAI_COMPATIBLE,
        "models_url": "https://dashscope.aliyuncs.com/compatible-mode/v1/models",
        "default_model": "qwen/qwen2.5-coder-32b-instruct",
    },
    "zai": {
        "name": "ZAI / GLM",
        "group": "domestic",
        "env_var_key": "ZAI_API_KEY",
        "fetch_strategy": FetchStrategy.UNSUPPORTED,
        "models_url": "",
        "default_model": "zai/glm-4.7",
    },
    "custom": {
        "name": "Custom provider",
        "group": "domestic",
        "env_var_key": None,
        "fetch_strategy": FetchStrategy.UNSUPPORTED,
        "models_url": "",
        "default_model": "",
    },
    LOCAL_PROVIDER_ID: {
        "name": "Ollama",
        "group": "local",
        "env_var_key": "",
        "fetch_strategy": None,
        "models_url": "",
        "default_model": "ollama/llama3.3",
    },
}

# Providers the gateway has no built-in catalog for.
STATIC_CATALOGS: dict[str, StaticCatalog] = {
    "deepseek": {
        "base_url": "https://api.deepseek.com/v1",
        "api": "openai-completions",
        "models": [
            {
                "id": "deepseek-chat",
                "name": "DeepSeek Chat",
                "reasoning": False,
                "input": ["text"],
                "context_window": 128000,
                "max_tokens": 8192,
            },
        ],
    },
}


def normalize_provider_id(provider_id: str) -> str:
    return provider_id.strip().lower()


def get_provider(provider_id: str) -> ProviderConfig | None:
    """Retrieve the registry entry for a provider id (case-insensitive)."""
    return PROVIDER_REGISTRY.get(normalize_provider_id(provider_id))


def resolve_credential_key(provider_id: str) -> str:
    """Return the env var name holding *provider_id*'s API key.

    The local-inference provider needs no key and resolves to ``""``.
    """
    provider = get_provider(provider_id)
    if provider is None or provider["env_var_key"] is None:
        raise UnsupportedProviderError(provider_id)
    return provider["env_var_key"]


def static_catalog(provider_id: str) -> StaticCatalog | None:
    return STATIC_CATALOGS.get(normalize_provider_id(provider_id))


def list_providers() -> list[dict]:
    """Return the registry in the shape the setup UI consumes."""
    providers = []
    for key, val in PROVIDER_REGISTRY.items():
        strategy = val["fetch_strategy"]
        providers.append({
            "id": key,
            "name": val["name"],
            "group": val["group"],
            "envKey": val["env_var_key"] or "",
            "supportsModelListing": strategy is not None and strategy is not FetchStrategy.UNSUPPORTED,
            "defaultModel": val["default_model"],
        })
    return providers
