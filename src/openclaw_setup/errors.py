"""Exceptions raised by the setup service core."""

from __future__ import annotations


class SetupError(Exception):
    """Base class for every error surfaced to the HTTP layer or the CLI."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(SetupError):
    """A required field is missing or empty. Raised before any mutation."""


class UnsupportedProviderError(SetupError):
    """The provider id is not in the registry."""

    def __init__(self, provider_id: str) -> None:
        super().__init__(f"unsupported provider: {provider_id}")
        self.provider_id = provider_id


class ProviderError(SetupError):
    """The upstream provider answered with an error status or a bad payload."""

    def __init__(self, body: str) -> None:
        super().__init__(f"provider error: {body}")
        self.body = body


class TransportError(SetupError):
    """The upstream provider could not be reached (network failure or timeout)."""


class PersistenceError(SetupError):
    """Reading or writing a config artifact on disk failed."""


class EnvFileNotFoundError(PersistenceError):
    """The env file to read does not exist."""
