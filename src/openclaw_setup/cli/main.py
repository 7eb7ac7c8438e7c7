"""Command-line entry point.

Usage:
    openclaw-setup init [--compose-dir=DIR]   generate openclaw.json from .env
    openclaw-setup [serve]                    run the setup API
"""

from __future__ import annotations

import argparse
import logging
import sys

from openclaw_setup.cli.init import resolve_compose_dir, run_init
from openclaw_setup.config.bootstrap import load_bootstrap_config
from openclaw_setup.errors import SetupError
from openclaw_setup.models.config import BootstrapConfig

logger = logging.getLogger(__name__)


def _cmd_init(cfg: BootstrapConfig, args: argparse.Namespace) -> int:
    compose_dir = resolve_compose_dir(args.compose_dir or cfg.compose_dir)
    try:
        result = run_init(compose_dir)
    except SetupError as e:
        logger.error("%s", e.message)
        return 1
    logger.info("openclaw.json generated at %s", result.config_path)
    return 0


def _cmd_serve(cfg: BootstrapConfig, args: argparse.Namespace) -> int:
    if not cfg.compose_dir:
        logger.error("OPENCLAW_COMPOSE_DIR is required")
        return 1

    import uvicorn

    from openclaw_setup.controller.app import create_app

    logger.info("OpenClaw setup listening on %s", cfg.listen_addr)
    uvicorn.run(create_app(cfg), host=cfg.listen_host, port=cfg.listen_port, log_level=cfg.log_level.lower())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="openclaw-setup", description="OpenClaw setup service")
    sub = parser.add_subparsers(dest="command")

    init = sub.add_parser("init", help="Generate openclaw.json from the deployment .env")
    init.add_argument("--compose-dir", default="", help="Deployment directory (default: $OPENCLAW_COMPOSE_DIR or cwd)")
    init.set_defaults(handler=_cmd_init)

    serve = sub.add_parser("serve", help="Run the setup API (default)")
    serve.set_defaults(handler=_cmd_serve)

    parser.set_defaults(handler=_cmd_serve)
    return parser


def main(argv: list[str] | None = None) -> int:
    cfg = load_bootstrap_config()
    logging.basicConfig(
        level=getattr(logging, cfg.log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    args = build_parser().parse_args(argv)
    return args.handler(cfg, args)


if __name__ == "__main__":
    sys.exit(main())
