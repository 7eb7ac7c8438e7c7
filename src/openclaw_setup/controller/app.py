"""FastAPI application factory for the setup service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from openclaw_setup.config.bootstrap import load_bootstrap_config
from openclaw_setup.deploy.restart import ComposeDeploymentController, RestartOrchestrator
from openclaw_setup.models.config import BootstrapConfig
from openclaw_setup.providers.fetch import ModelFetchDispatcher

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    cfg: BootstrapConfig = app.state.config
    logger.info(
        "Setup service ready (compose_dir=%s, config_dir=%s)",
        cfg.compose_dir or "<unset>", cfg.config_dir or "<unset>",
    )
    yield


def create_app(
    cfg: BootstrapConfig | None = None,
    *,
    restarter: RestartOrchestrator | None = None,
    model_fetcher: ModelFetchDispatcher | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Components default to the real implementations; tests pass fakes.
    """
    cfg = cfg or load_bootstrap_config()
    app = FastAPI(
        title="OpenClaw Setup",
        description="Configure and restart a local OpenClaw gateway",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.config = cfg
    app.state.restarter = restarter or RestartOrchestrator(
        lambda compose_dir: ComposeDeploymentController(compose_dir, cfg.container_name),
    )
    app.state.model_fetcher = model_fetcher or ModelFetchDispatcher()

    from openclaw_setup.controller.routes.config import router as config_router
    from openclaw_setup.controller.routes.health import router as health_router
    from openclaw_setup.controller.routes.models import router as models_router

    app.include_router(health_router)
    app.include_router(config_router, prefix="/api")
    app.include_router(models_router, prefix="/api")

    # Mount frontend static files (after API routes so they don't shadow them)
    if cfg.static_dir and Path(cfg.static_dir).is_dir():
        app.mount("/", StaticFiles(directory=cfg.static_dir, html=True), name="frontend")

    return app
