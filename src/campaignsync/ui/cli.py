# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from campaignsync.app import handle_event
from campaignsync.config import configure_logging, get_integration_config
from campaignsync.domain.event import DEFAULT_CAMPAIGN

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile campaign events into Marketing Cloud")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log state transitions and SOAP outcomes",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    submit = subparsers.add_parser("submit", help="Insert or update the row for one event")
    submit.add_argument("--email", type=str, required=True, help="Participant email address")
    submit.add_argument(
        "--campaign",
        type=str,
        default=DEFAULT_CAMPAIGN,
        help="Campaign identifier (default: %(default)s)",
    )
    submit.add_argument(
        "--discount",
        type=str,
        help="Discount won, a number between 0 and 100",
    )
    submit.add_argument(
        "--result",
        type=str,
        help="Spin result, 'won' or 'lost'",
    )
    submit.add_argument("--variation-id", type=str, help="Experience variation identifier")
    submit.add_argument("--source", type=str, help="Event source label (defaults to config)")
    submit.add_argument(
        "--update-only",
        action="store_true",
        help="Skip the insert attempt and update the existing row",
    )

    subparsers.add_parser("check-config", help="Validate configuration and print the field map")

    return parser.parse_args(list(argv))


def _check_config() -> int:
    config = get_integration_config()
    schema = config.schema
    print(
        json.dumps(
            {
                "dataExtension": config.data_extension_key,
                "fields": [schema.column(name) for name in schema.allowlist],
                "keys": [schema.column(name) for name in schema.key_fields],
                "soapUrl": config.soap_url,
                "winnersOnly": config.winners_only,
            },
            indent=2,
        )
    )
    return 0


def _submit(args: argparse.Namespace) -> int:
    status, body = handle_event(
        email=args.email,
        campaign=args.campaign,
        discount=args.discount,
        result=args.result,
        variation_id=args.variation_id,
        source=args.source,
        update_only=args.update_only,
    )
    print(json.dumps(body, indent=2))
    if body.get("ok"):
        return 0
    return 2 if status == 400 else 1


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "submit":
            code = _submit(parsed_args)
        elif parsed_args.command == "check-config":
            code = _check_config()
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)

    if code:
        sys.exit(code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
