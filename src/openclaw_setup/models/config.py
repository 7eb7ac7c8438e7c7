"""Configuration models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class BootstrapConfig(BaseModel):
    """Process-level configuration loaded once from environment variables.

    Passed explicitly to the app factory and the CLI; the config writer,
    env store, fetcher and restart orchestrator never read the environment.
    """

    listen_addr: str = Field(
        default="0.0.0.0:8188",
        description="host:port the admin API binds to.",
    )
    compose_dir: str = Field(
        default="",
        description="Deployment directory holding docker-compose.yml, .env and data/.",
    )
    container_name: str = Field(
        default="",
        description="Name of the gateway container, used for log context only.",
    )
    static_dir: str = Field(
        default="web/dist",
        description="Built single-page app served at /.",
    )
    log_level: str = Field(default="INFO")

    @field_validator("listen_addr")
    @classmethod
    def validate_listen_addr(cls, v: str) -> str:
        _split_listen_addr(v)
        return v

    @property
    def config_dir(self) -> str:
        """Directory the gateway reads openclaw.json from."""
        if not self.compose_dir:
            return ""
        return str(Path(self.compose_dir) / "data" / "conf")

    @property
    def listen_host(self) -> str:
        return _split_listen_addr(self.listen_addr)[0]

    @property
    def listen_port(self) -> int:
        return _split_listen_addr(self.listen_addr)[1]


def _split_listen_addr(addr: str) -> tuple[str, int]:
    """Split ``host:port`` (IPv6 hosts in brackets) into host and port."""
    host, sep, port = addr.strip().rpartition(":")
    if not sep or not port.isdigit() or not 0 < int(port) < 65536:
        raise ValueError(f"listen address must be host:port, got {addr!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host or "0.0.0.0", int(port)
