"""Command line interface: serve the API or run one writer/notifier invocation."""

import argparse
import asyncio
import json
import os
import sys
from typing import List, Optional

import structlog

from throttle_relay.config import load_settings, reset_settings
from throttle_relay.handlers import run_notifier, run_writer
from throttle_relay.main import main as serve, setup_logging
from throttle_relay.notifier.sender import DeliveryError, WebhookConfigError
from throttle_relay.writer.driver import InvalidBatchSizeError, ThrottlingDetectedError


logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="throttle-relay",
        description="Store throttling load driver and signed incident relay",
    )
    parser.add_argument("--config", default=None, help="Path to YAML config")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="Run the HTTP service")

    write_p = sub.add_parser("write", help="Run one write batch")
    write_p.add_argument("--count", type=int, default=None, help="Number of concurrent writes")

    notify_p = sub.add_parser("notify", help="Dispatch one alarm event")
    notify_p.add_argument("event", help="Path to alarm event JSON ('-' for stdin)")

    return parser


def _read_event(path: str) -> dict:
    if path == "-":
        return json.load(sys.stdin)
    with open(path, "r") as f:
        return json.load(f)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        # The app loads its settings through get_settings()
        if args.config:
            os.environ["THROTTLE_RELAY_CONFIG_PATH"] = args.config
            reset_settings()
        serve()
        return 0

    settings = load_settings(args.config)
    setup_logging(settings)

    if args.command == "write":
        try:
            result = asyncio.run(run_writer(settings, count=args.count))
        except InvalidBatchSizeError as e:
            logger.error("Invalid batch size", error=str(e))
            return 2
        except ThrottlingDetectedError as e:
            print(json.dumps(e.result.to_dict()))
            return 1
        print(json.dumps(result))
        return 0

    if args.command == "notify":
        try:
            result = asyncio.run(run_notifier(settings, _read_event(args.event)))
        except WebhookConfigError as e:
            logger.error("Webhook misconfigured", error=str(e))
            return 2
        except DeliveryError as e:
            logger.error("Failed to deliver incident", status=e.status_code, error=str(e))
            return 1
        print(json.dumps(result or {"status": "skipped"}))
        return 0

    parser.print_help()
    return 2


if __name__ == "__main__":
    sys.exit(main())
