"""
Command-line entry point: print today's snapshot or the history series as JSON.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from txpulse.config import Settings, get_settings
from txpulse.schemas import history_payload, published_payload
from txpulse.services.pulse import PulseService

logger = logging.getLogger("txpulse")


def configure_logging(settings: Settings) -> None:
    # Logs go to stderr so stdout stays valid JSON
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=settings.LOG_FORMAT, stream=sys.stderr)


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    demo_help = "Skip live collection and serve demo data"
    parser = argparse.ArgumentParser(prog="txpulse", description="Texas political sentiment pulse")
    parser.add_argument("--demo", action="store_true", help=demo_help)

    # Also accepted after the subcommand; SUPPRESS keeps it from resetting the top-level value
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--demo", action="store_true", default=argparse.SUPPRESS, help=demo_help)

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("today", parents=[common], help="Print today's sentiment snapshot")

    history = sub.add_parser("history", parents=[common], help="Print the trend history series")
    history.add_argument("--days", type=int, default=settings.HISTORY_DAYS, help="Number of days (default: %(default)s)")
    return parser


async def run(command: str, service: PulseService, days: int) -> object:
    if command == "today":
        snapshot = await service.today()
        return published_payload(snapshot)
    return history_payload(service.history(days))


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    args = build_parser(settings).parse_args(argv)
    if args.demo:
        settings = settings.model_copy(update={"USE_DEMO": True})

    configure_logging(settings)
    logger.info("Collector=%s formula=%s weighting=%s",
                settings.COLLECTOR, settings.sentiment_formula, settings.score_weighting)

    service = PulseService.from_settings(settings)
    payload = asyncio.run(run(args.command, service, getattr(args, "days", settings.HISTORY_DAYS)))
    json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
