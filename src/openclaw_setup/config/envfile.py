"""Env file store — reads and surgically rewrites ``KEY=VALUE`` files.

The deployment's ``.env`` is shared with docker compose and usually holds
settings this service knows nothing about, so writes only ever touch the
lines they target and keep everything else byte-for-byte.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from openclaw_setup.errors import EnvFileNotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

GATEWAY_TOKEN_KEY = "OPENCLAW_GATEWAY_TOKEN"
# Pre-rename spelling; either one is rewritten to the canonical key.
LEGACY_GATEWAY_TOKEN_KEY = "CLAWDBOT_GATEWAY_TOKEN"
_TOKEN_KEYS = frozenset({GATEWAY_TOKEN_KEY, LEGACY_GATEWAY_TOKEN_KEY})

PRIVATE_FILE_MODE = 0o600


def write_private_file(path: str | Path, content: str) -> None:
    """Write *content* to *path*, leaving it readable by the owner only."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, PRIVATE_FILE_MODE)
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        fh.write(content)
    # os.open only applies the mode on creation
    os.chmod(path, PRIVATE_FILE_MODE)


def normalize_env_value(value: str) -> str:
    """Trim *value* and strip one layer of double, then single, quotes."""
    trimmed = value.strip()
    for quote in ('"', "'"):
        if trimmed.startswith(quote):
            trimmed = trimmed[1:]
        if trimmed.endswith(quote):
            trimmed = trimmed[:-1]
    return trimmed.strip()


def _split_assignment(line: str) -> tuple[str, str] | None:
    """Return ``(key, raw_value)`` for an assignment line, else None."""
    trimmed = line.strip()
    if not trimmed or trimmed.startswith("#"):
        return None
    key, sep, value = trimmed.partition("=")
    if not sep:
        return None
    key = key.strip()
    if not key:
        return None
    return key, value


def _lines(content: str) -> list[str]:
    """Split on LF only; a trailing CR is dropped."""
    return [line.removesuffix("\r") for line in content.split("\n")]


def read_env_file(path: str | Path) -> dict[str, str]:
    """Parse *path* into a mapping. The last occurrence of a key wins."""
    try:
        content = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise EnvFileNotFoundError(f"read .env: {path} does not exist") from e
    except OSError as e:
        raise PersistenceError(f"read .env: {e}") from e

    result: dict[str, str] = {}
    for line in _lines(content):
        parsed = _split_assignment(line)
        if parsed is None:
            continue
        key, value = parsed
        result[key] = normalize_env_value(value)
    return result


def upsert_gateway_token(path: str | Path, token: str) -> bool:
    """Set the gateway token in the env file at *path*.

    Every line assigning the current or legacy token key is rewritten to the
    canonical key; if none exists a line is appended. Returns True when an
    existing line was rewritten.
    """
    if not token.strip():
        raise ValidationError("generated token is empty")

    try:
        content = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise EnvFileNotFoundError(f"read .env: {path} does not exist") from e
    except OSError as e:
        raise PersistenceError(f"read .env: {e}") from e

    lines = content.split("\n")
    new_line = f"{GATEWAY_TOKEN_KEY}={token}"
    updated = False
    for i, line in enumerate(lines):
        parsed = _split_assignment(line)
        if parsed is None or parsed[0] not in _TOKEN_KEYS:
            continue
        lines[i] = new_line
        updated = True

    if not updated:
        if lines and lines[-1] == "":
            # keep the trailing newline after the appended line
            lines.insert(len(lines) - 1, new_line)
        else:
            lines.append(new_line)

    try:
        write_private_file(path, "\n".join(lines))
    except OSError as e:
        raise PersistenceError(f"write .env: {e}") from e

    logger.info("%s gateway token in %s", "Updated" if updated else "Added", path)
    return updated
