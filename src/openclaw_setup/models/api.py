"""Request/response schemas for the admin API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ProviderKeyIn(BaseModel):
    key: str = ""
    value: str = ""


class ConfigRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    model: str = ""
    gateway_token: str = Field(default="", alias="gatewayToken")
    providers: list[ProviderKeyIn] = Field(default_factory=list)


class ConfigResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool
    restarted: bool = False
    message: str
    restart_error: str | None = Field(default=None, alias="restartError")


class ModelsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    provider: str = ""
    api_key: str = Field(default="", alias="apiKey")


class ModelsResponse(BaseModel):
    models: list[str] = Field(default_factory=list)
    message: str | None = None
