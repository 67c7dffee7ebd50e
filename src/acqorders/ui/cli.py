from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, cast

from dotenv import load_dotenv

from acqorders.app import (
    get_receiving_history,
    receive_pieces,
    render_receiving_history,
    render_receiving_results,
    render_update_result,
    update_order,
)
from acqorders.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage acquisition orders")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log request bodies and other debug output",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    update = subparsers.add_parser("update-order", help="Update a composite purchase order")
    update.add_argument("order_id", type=str, help="Id of the order to update")
    update.add_argument(
        "--file",
        type=Path,
        required=True,
        help="JSON file holding the desired composite order",
    )

    receive = subparsers.add_parser("receive", help="Receive pieces")
    receive.add_argument(
        "--file",
        type=Path,
        required=True,
        help="JSON file holding the receiving collection",
    )

    history = subparsers.add_parser("receiving-history", help="Show the receiving history")
    history.add_argument("--limit", type=int, default=10, help="Page size (default: %(default)s)")
    history.add_argument("--offset", type=int, default=0, help="Page offset (default: %(default)s)")
    history.add_argument("--query", type=str, help="Optional CQL filter")

    return parser.parse_args(list(argv))


def _read_json(path: Path) -> dict[str, object]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ValueError(f"Cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object in {path}")
    return cast("dict[str, object]", payload)


def _validate(args: argparse.Namespace) -> dict[str, object] | None:
    if args.command == "receiving-history":
        if args.limit < 0 or args.offset < 0:
            raise ValueError("--limit and --offset must be non-negative")
        return None
    return _read_json(args.file)


def _emit(payload: object) -> None:
    sys.stdout.write(json.dumps(payload, indent=2) + "\n")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        body = _validate(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "update-order":
            result = update_order(parsed_args.order_id, body or {})
            rendered = render_update_result(result)
            if rendered is not None:
                _emit(rendered)
                log.error("Order %s was not updated (HTTP %s)", parsed_args.order_id, result.http_status)
                sys.exit(1)
        elif parsed_args.command == "receive":
            _emit(render_receiving_results(receive_pieces(body or {})))
        elif parsed_args.command == "receiving-history":
            history = get_receiving_history(
                limit=parsed_args.limit,
                offset=parsed_args.offset,
                query=parsed_args.query,
            )
            _emit(render_receiving_history(history))
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


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
