"""Shared test fixtures."""

from __future__ import annotations

import pytest
from pathlib import Path


@pytest.fixture
def compose_dir(tmp_path: Path) -> Path:
    """Create a deployment directory whose .env holds unrelated compose settings."""
    deploy = tmp_path / "deploy"
    deploy.mkdir()
    (deploy / ".env").write_text("# compose settings\nCOMPOSE_PROJECT_NAME=openclaw\n")
    return deploy
