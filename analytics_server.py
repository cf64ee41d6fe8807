"""Entrypoint launching the analytics FastAPI app."""

from __future__ import annotations

import argparse
from pathlib import Path

import uvicorn

from feedback_analytics.server import create_app
from utils.logger_setup import setup_logging_from_config


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the assessment analytics API server")
    parser.add_argument("--host", default="127.0.0.1", help="Host interface to bind")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind")
    parser.add_argument("--config", default=None, help="Path to the YAML configuration file")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload (development only)")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    config_path = Path(args.config) if args.config else None
    if config_path is not None:
        setup_logging_from_config(config_path)
    app = create_app(settings_path=config_path)
    uvicorn.run(app, host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
