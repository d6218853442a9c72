"""
Command-line interface for the EnergyGrid Aggregator.

Provides commands for running a single aggregation and serving the API.
"""

import argparse
import asyncio
import json
import logging
import sys

import structlog

from aggregator import __version__
from aggregator.config import AggregatorConfig, set_config
from aggregator.core.aggregator import aggregate_device_data


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_format
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Logs go to stderr so the report on stdout stays machine-readable
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="energygrid-aggregator",
        description="Batch telemetry aggregator for rate-limited device APIs",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Run command (one aggregation)
    run_parser = subparsers.add_parser("run", help="Run one aggregation and print the report")
    run_parser.add_argument(
        "--host",
        help="Telemetry API host (default: from config)",
    )
    run_parser.add_argument(
        "--port",
        type=int,
        help="Telemetry API port (default: from config)",
    )
    run_parser.add_argument(
        "--devices",
        type=int,
        help="Number of devices to query (default: 500)",
    )

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Serve the mock API and the aggregate endpoint")
    serve_parser.add_argument(
        "--host",
        help="Bind host (default: 0.0.0.0)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        help="Bind port (default: 3000)",
    )

    for sub in (run_parser, serve_parser):
        sub.add_argument(
            "--log-level",
            choices=["DEBUG", "INFO", "WARNING", "ERROR"],
            default=None,
            help="Logging level (default: INFO)",
        )
        sub.add_argument(
            "--log-json",
            action="store_true",
            help="Output logs in JSON format",
        )

    return parser


def build_config(args: argparse.Namespace) -> AggregatorConfig:
    """Overlay command-line options on the environment configuration."""
    overrides = {}

    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.log_json:
        overrides["log_json"] = True

    if args.command == "run":
        if args.host:
            overrides["api_host"] = args.host
        if args.port:
            overrides["api_port"] = args.port
        if args.devices is not None:
            overrides["device_count"] = args.devices
    elif args.command == "serve":
        if args.host:
            overrides["server_host"] = args.host
        if args.port:
            overrides["server_port"] = args.port

    return AggregatorConfig(**overrides)


async def run_aggregation(config: AggregatorConfig) -> int:
    """Run one aggregation and print the report as JSON."""
    print(f"Starting EnergyGrid Data Aggregator v{__version__}", file=sys.stderr)
    print(f"Target: {config.device_count} devices in batches of {config.batch_size}", file=sys.stderr)
    print(f"Rate limit: {config.rate_limit_ms}ms between requests", file=sys.stderr)

    report = await aggregate_device_data(config=config)

    print(json.dumps(report.to_dict(), indent=2))
    return 0


def serve(config: AggregatorConfig) -> None:
    """Serve the combined API with uvicorn."""
    import uvicorn

    from aggregator.server.app import create_app

    app = create_app(config)
    uvicorn.run(
        app,
        host=config.server_host,
        port=config.server_port,
        log_level=config.log_level.lower(),
    )


def main() -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = build_config(args)
    set_config(config)
    setup_logging(config.log_level, config.log_json)

    if args.command == "run":
        try:
            sys.exit(asyncio.run(run_aggregation(config)))
        except Exception as e:
            structlog.get_logger(__name__).error("aggregation_fatal", error=str(e))
            sys.exit(1)
    elif args.command == "serve":
        serve(config)


if __name__ == "__main__":
    main()
