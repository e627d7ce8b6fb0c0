#!/usr/bin/env python3
"""Command-line front end.

Usage:
    tsnconf [--inventory PATH] [-v] apply CONFIG_ID [--dry-run] [--workers N]
    tsnconf [--inventory PATH] [-v] render CONFIG_ID --node ID --port NAME
    tsnconf [--inventory PATH] [-v] features
    tsnconf [-v] history [--node ID] [--limit N]

Exit codes:
    0  applied
    1  failure (not applied, or an error)
    2  partially applied
"""
import argparse
import asyncio
import dataclasses
import logging
import os
import sys
from typing import Optional

from .config.settings import Settings
from .engine import OutcomeStatus
from .errors import TSNConfigError
from .service import ConfigService
from .utils.audit_log import AUDIT_FILE_NAME, get_recent_pushes, setup_audit_logging
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_PARTIAL = 2

EXIT_CODES = {
    OutcomeStatus.APPLIED: EXIT_OK,
    OutcomeStatus.PARTIALLY_APPLIED: EXIT_PARTIAL,
    OutcomeStatus.NOT_APPLIED: EXIT_FAILURE,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tsnconf",
        description="Push TSN gate-control schedules to NETCONF bridges",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Preview what every port would receive
    tsnconf apply cycle-500us --dry-run

    # Show the payload for one port
    tsnconf render cycle-500us --node bridge-1 --port sw0p2

Environment:
    NETCONF_PASSWORD       Device credentials (per-node password_env overrides)
    TSNCONF_INVENTORY      Inventory file
    TSNCONF_MAX_WORKERS    Concurrent pushes (default: 8)
""",
    )
    parser.add_argument("--inventory", help="Inventory YAML file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    apply_cmd = sub.add_parser("apply", help="Apply a configuration to the topology")
    apply_cmd.add_argument("config_id")
    apply_cmd.add_argument("--dry-run", action="store_true", help="Render payloads only")
    apply_cmd.add_argument("--workers", type=int, help="Concurrent pushes")

    render_cmd = sub.add_parser("render", help="Render the payload for one port")
    render_cmd.add_argument("config_id")
    render_cmd.add_argument("--node", required=True)
    render_cmd.add_argument("--port", required=True)

    sub.add_parser("features", help="List registered features and plugins")

    history_cmd = sub.add_parser("history", help="Show recent pushes from the audit log")
    history_cmd.add_argument("--node", help="Filter by node ID")
    history_cmd.add_argument("--limit", type=int, default=20)

    return parser


def _settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    if args.inventory:
        settings.inventory_path = args.inventory
    workers = getattr(args, "workers", None)
    if workers:
        settings = dataclasses.replace(settings, max_workers=workers)
    return settings


def cmd_apply(service: ConfigService, args: argparse.Namespace) -> int:
    response = asyncio.run(service.apply_configuration(args.config_id, dry_run=args.dry_run))
    outcome = response.outcome
    for result in outcome.results:
        line = f"{result.node_id}/{result.interface}: {result.status.value}"
        if result.plugin:
            line += f" [{result.plugin}]"
        if result.error:
            line += f" - {result.error}"
        print(line)
        if args.dry_run and result.payload:
            print(result.payload)
    print(response.message)
    return EXIT_CODES[outcome.status]


def cmd_render(service: ConfigService, args: argparse.Namespace) -> int:
    print(service.render_configuration(args.config_id, args.node, args.port))
    return EXIT_OK


def cmd_features(service: ConfigService, args: argparse.Namespace) -> int:
    for protocol, features in service.supported_features().items():
        print(protocol)
        for feature, plugins in features.items():
            print(f"  {feature}: {', '.join(plugins)}")
    return EXIT_OK


def cmd_history(settings: Settings, args: argparse.Namespace) -> int:
    log_file = os.path.join(settings.audit_dir, AUDIT_FILE_NAME) if settings.audit_dir else None
    for record in get_recent_pushes(log_file, node_id=args.node, limit=args.limit):
        print(record.to_json())
    return EXIT_OK


COMMANDS = {
    "apply": cmd_apply,
    "render": cmd_render,
    "features": cmd_features,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the tsnconf CLI."""
    args = build_parser().parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else None)

    try:
        settings = _settings(args)
        if args.command == "history":
            return cmd_history(settings, args)

        setup_audit_logging(settings.audit_dir)
        service = ConfigService.from_settings(settings)
        return COMMANDS[args.command](service, args)
    except TSNConfigError as e:
        logger.error(f"{e.kind}: {e}")
        return EXIT_FAILURE
    except ValueError as e:
        logger.error(f"Invalid settings: {e}")
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
