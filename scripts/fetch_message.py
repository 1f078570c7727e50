# scripts/fetch_message.py
"""Flatten a local .eml file or a Gmail message and print its leaf parts as JSON."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys

from mimeflat import MIMEError, parse_message
from mimeflat.tool import (
    build_gmail_service,
    fetch_raw_message,
    list_message_ids,
    summarize_parts,
)

TOKEN = Path("token.json")
SECRET = Path("client_secret.json")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Flatten a MIME message into its decoded leaf parts.")
    parser.add_argument(
        "--eml",
        help="Path to a raw RFC 822 message on disk. If omitted, the message is fetched from Gmail.",
    )
    parser.add_argument(
        "--message-id",
        help="Explicit Gmail message ID to flatten. If omitted, uses the newest message.",
    )
    parser.add_argument(
        "--output",
        "-o",
        default="-",
        help="Where to store the part summary (use '-' for stdout; default: %(default)s).",
    )
    parser.add_argument(
        "--labels",
        nargs="*",
        default=None,
        help="Optional list of label IDs to filter when picking the newest message.",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List recent message IDs instead of flattening (honors --max-results/--labels).",
    )
    parser.add_argument(
        "--max-results",
        type=int,
        default=5,
        help="How many IDs to list when using --list (default: %(default)s).",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Reject messages whose multipart nesting goes deeper than this.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    return parser


def _flatten_gmail(args: argparse.Namespace):
    gmail = build_gmail_service(token_path=TOKEN, client_secret_path=SECRET)

    if args.list:
        ids = list_message_ids(gmail, max_results=args.max_results, label_ids=args.labels)
        if not ids:
            print("No messages returned.")
            return None
        print("Recent message IDs:")
        for mid in ids:
            print(f"  {mid}")
        return None

    message_id = args.message_id
    if not message_id:
        ids = list_message_ids(gmail, max_results=1, label_ids=args.labels)
        if not ids:
            raise SystemExit("No messages found. Try adjusting labels or mailbox contents.")
        message_id = ids[0]
        print(f"No --message-id provided; using newest message {message_id}.", file=sys.stderr)

    return parse_message(fetch_raw_message(gmail, message_id), max_depth=args.max_depth)


def main(argv: list[str] | None = None) -> int:
    argp = build_parser()
    args = argp.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.eml:
            with open(args.eml, "rb") as fh:
                parts = parse_message(fh, max_depth=args.max_depth)
        else:
            parts = _flatten_gmail(args)
            if parts is None:
                return 0
    except MIMEError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    summary = summarize_parts(parts)
    if args.output == "-":
        json.dump(summary, sys.stdout, indent=2)
        sys.stdout.write("\n")
        sys.stdout.flush()
        return 0

    Path(args.output).write_text(json.dumps(summary, indent=2))
    print(f"Saved {len(summary)} parts to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
