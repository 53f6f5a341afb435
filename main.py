#!/usr/bin/env python
"""CLI for the eventscope details and update pipelines."""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, field_validator

from eventscope.config import create_from_config, get_default_config_path, load_config
from eventscope.errors import ConfigurationError
from eventscope.pipeline import DetailsRunResult, UpdateRunResult

logger = logging.getLogger(__name__)


class CLIArgs(BaseModel):
    """Validated CLI arguments."""

    command: Literal["details", "updates", "serve"]
    event_id: str | None = None
    config: Path
    log: bool = False
    log_dir: str = "logs"
    host: str = "127.0.0.1"
    port: int = 8000

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v


def _log_usage(result: DetailsRunResult | UpdateRunResult) -> None:
    usage = result.usage
    logger.info("\n--- Usage Summary ---")
    logger.info(f"API calls: {len(usage.api_calls)}")
    logger.info(f"Input tokens: {usage.input_tokens:,}")
    logger.info(f"Output tokens: {usage.output_tokens:,}")
    if usage.search_requests:
        logger.info(f"Search requests: {usage.search_requests}")
    if usage.image_requests:
        logger.info(f"Image requests: {usage.image_requests}")
    if usage.page_fetches:
        logger.info(f"Page fetches: {usage.page_fetches}")
    logger.info(f"Estimated cost: ${usage.estimated_cost:.4f}")


async def run(args: CLIArgs) -> int:
    """Execute one pipeline run with the given configuration.

    Args:
        args: Validated CLI arguments.

    Returns:
        Process exit code.
    """
    config = load_config(args.config)
    components = create_from_config(
        config,
        log_override=args.log if args.log else None,
        log_dir_override=args.log_dir if args.log_dir != "logs" else None,
    )

    logger.info(f"Running {args.command} pipeline for event: {args.event_id}")
    logger.info(f"Config: {args.config}")

    if args.command == "details":
        result: DetailsRunResult | UpdateRunResult = await components.details_pipeline.run(
            args.event_id or ""
        )
    else:
        result = await components.update_pipeline.run(args.event_id or "")

    print(json.dumps(result.to_summary(), indent=2))
    _log_usage(result)

    if result.log_path:
        logger.info(f"\nRun log written to: {result.log_path}")

    return 0 if result.ok else 1


def serve(args: CLIArgs) -> None:
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    from eventscope.api import create_app

    config = load_config(args.config)
    components = create_from_config(
        config,
        log_override=args.log if args.log else None,
        log_dir_override=args.log_dir if args.log_dir != "logs" else None,
    )
    app = create_app(components, os.environ.get("API_SECRET_KEY"))
    uvicorn.run(app, host=args.host, port=args.port)


def main() -> None:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Synthesize and update event details from news.")
    parser.add_argument(
        "command",
        choices=["details", "updates", "serve"],
        help="Pipeline to run, or 'serve' to start the HTTP API",
    )
    parser.add_argument(
        "event_id",
        nargs="?",
        help="Event identifier (required for details and updates)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: configs/default.yaml)",
    )
    parser.add_argument(
        "--log",
        action="store_true",
        default=False,
        help="Enable intermediate pipeline logging to JSON file",
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default="logs",
        help="Directory for log files (default: logs/)",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Bind address for serve")
    parser.add_argument("--port", type=int, default=8000, help="Port for serve")

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    ns = parser.parse_args()
    config_path: Path = ns.config if ns.config else get_default_config_path()
    if ns.command != "serve" and not ns.event_id:
        parser.error(f"event_id is required for '{ns.command}'")

    try:
        args = CLIArgs(
            command=ns.command,
            event_id=ns.event_id,
            config=config_path,
            log=ns.log,
            log_dir=ns.log_dir,
            host=ns.host,
            port=ns.port,
        )
    except Exception as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        if args.command == "serve":
            serve(args)
        else:
            sys.exit(asyncio.run(run(args)))
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(2)
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
