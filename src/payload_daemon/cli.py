"""
Command-line decoder for telemetry payloads.

Usage:
    payload-decode 20050500000000000000c4099001
    payload-decode --file payload.bin --pretty
    echo 20050500000000000000c4099001 | payload-decode --raw

Prints the decoded payload as JSON on stdout. Exit codes: 0 on success, 1 when
the payload cannot be decoded, 2 when the input itself is unusable.
"""

import argparse
import logging
import sys

from payload_daemon.config import configure_logger
from telemetry_decoder import (
    CatalogError,
    PayloadDecodeError,
    decode_payload_to_json,
    load_field_catalog,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_DECODE_ERROR = 1
EXIT_BAD_INPUT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payload-decode",
        description="Decode a cellular telemetry payload and print it as JSON.",
    )
    parser.add_argument(
        "payload",
        nargs="?",
        help="Payload as hex text. Read from stdin when omitted and --file is not given.",
    )
    parser.add_argument("--file", "-f", help="Read the payload from a binary file.")
    parser.add_argument(
        "--raw", action="store_true", help="Print raw integer values (no scaling)."
    )
    parser.add_argument("--pretty", action="store_true", help="Indent the JSON output.")
    parser.add_argument("--catalog", help="Path to an alternative field catalog YAML file.")
    return parser


def read_payload(args: argparse.Namespace, stdin=None) -> bytes:
    """
    Returns the payload bytes selected by the command-line arguments.

    Raises:
        ValueError: If the hex text is invalid or no payload was given.
        OSError: If --file cannot be read.
    """
    if args.file:
        with open(args.file, "rb") as f:
            return f.read()

    text = args.payload
    if text is None:
        text = (stdin or sys.stdin).read()
    text = "".join(text.split()).replace(":", "")
    if text.lower().startswith("0x"):
        text = text[2:]
    if not text:
        raise ValueError("No payload given")
    return bytes.fromhex(text)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logger()

    try:
        payload = read_payload(args)
    except (ValueError, OSError) as e:
        print(f"payload-decode: cannot read payload: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT

    try:
        catalog = load_field_catalog(args.catalog)
    except CatalogError as e:
        print(f"payload-decode: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT

    try:
        output = decode_payload_to_json(
            payload, pretty=args.pretty, apply_scaling=not args.raw, catalog=catalog
        )
    except PayloadDecodeError as e:
        print(f"payload-decode: {e.kind}: {e}", file=sys.stderr)
        return EXIT_DECODE_ERROR

    print(output)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
