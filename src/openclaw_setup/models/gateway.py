"""Gateway configuration document — the schema of openclaw.json.

Field declaration order is the serialized key order. Dump with
``by_alias=True, exclude_none=True`` so optional blocks disappear instead of
being written as ``null``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class GatewayAuth(_CamelModel):
    mode: Literal["token"] = "token"
    token: str = Field(..., min_length=1)


class GatewayControlUi(_CamelModel):
    allow_insecure_auth: bool = Field(default=True, alias="allowInsecureAuth")


class GatewaySection(_CamelModel):
    mode: Literal["local"] = "local"
    bind: Literal["lan"] = "lan"
    port: int = 18789
    auth: GatewayAuth
    control_ui: GatewayControlUi = Field(default_factory=GatewayControlUi, alias="controlUi")


class ModelRef(_CamelModel):
    primary: str = Field(..., min_length=1)


class AgentDefaults(_CamelModel):
    model: ModelRef


class AgentsSection(_CamelModel):
    defaults: AgentDefaults


class CatalogModel(_CamelModel):
    id: str
    name: str
    reasoning: bool = False
    input: list[str] = Field(default_factory=lambda: ["text"])
    context_window: int = Field(alias="contextWindow")
    max_tokens: int = Field(alias="maxTokens")


class ModelProvider(_CamelModel):
    api_key: str | None = Field(default=None, alias="apiKey")
    base_url: str | None = Field(default=None, alias="baseUrl")
    api: str | None = None
    models: list[CatalogModel] = Field(default_factory=list)


class ModelsSection(_CamelModel):
    mode: str = "merge"
    providers: dict[str, ModelProvider] = Field(default_factory=dict)


class GatewayConfig(_CamelModel):
    """Root of openclaw.json."""

    gateway: GatewaySection
    agents: AgentsSection
    models: ModelsSection | None = None

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)
