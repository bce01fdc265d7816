# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""restbridge CLI."""

from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Iterator
from typing import Any

import httpx

from ..config import HttpSettings, load_http_settings
from ..errors import InvalidArgumentError, categorize_exception, error_category_to_reason
from ..http.models import BodyKind
from ..log import setup_logging
from ..runtime import RestBridge

DEFAULT_FILE_CONTENT_TYPE = "application/octet-stream"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send a REST request and print the response")
    parser.add_argument("method", help="HTTP method (GET, POST, PUT, ...)")
    parser.add_argument("url", help="Absolute endpoint URL")
    parser.add_argument(
        "-H",
        "--header",
        action="append",
        default=[],
        metavar="NAME: VALUE",
        help="Request header; may be repeated",
    )
    body = parser.add_mutually_exclusive_group()
    body.add_argument("--body", help="Request body text")
    body.add_argument("--body-file", help="Read the request body text from a file")
    body.add_argument("--file", help="Upload a file as a multipart attachment (streamed)")
    parser.add_argument(
        "--body-kind",
        choices=[kind.value for kind in BodyKind],
        default=BodyKind.PLAIN_TEXT.value,
        help="Content type of --body/--body-file (default: plain-text)",
    )
    parser.add_argument(
        "--content-type",
        default=DEFAULT_FILE_CONTENT_TYPE,
        help=f"MIME type of --file (default: {DEFAULT_FILE_CONTENT_TYPE})",
    )
    parser.add_argument("--file-name", help="File name sent for --file (default: its base name)")
    parser.add_argument("--output", help="Stream the response body into this file instead of printing it")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output a JSON summary instead of the raw response",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def parse_header_args(values: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition(":")
        name = name.strip()
        if not sep or not name:
            raise ValueError(f"Invalid header {raw!r}; expected 'Name: value'")
        headers[name] = value.strip()
    return headers


def _file_writer(path: str):
    def write(chunks: Iterator[bytes]) -> None:
        with open(path, "wb") as handle:
            for chunk in chunks:
                handle.write(chunk)

    return write


def _send(bridge: RestBridge, args: argparse.Namespace, headers: dict[str, str]) -> httpx.Response:
    writer = _file_writer(args.output) if args.output else None

    if args.file:
        file_name = args.file_name or os.path.basename(args.file)
        with open(args.file, "rb") as stream:
            return bridge.rest_file(
                args.method,
                args.url,
                headers,
                args.content_type,
                file_name,
                stream,
                response_writer=writer,
            )

    body = args.body
    if args.body_file:
        with open(args.body_file, encoding="utf-8") as handle:
            body = handle.read()
    return bridge.rest(
        args.method,
        args.url,
        headers,
        body_kind=args.body_kind,
        body=body,
        response_writer=writer,
    )


def _summary(response: httpx.Response, output: str | None) -> dict[str, Any]:
    summary: dict[str, Any] = {
        "status_code": response.status_code,
        "reason": response.reason_phrase,
        "url": str(response.request.url),
        "headers": dict(response.headers),
    }
    if output:
        summary["output"] = output
    else:
        summary["body"] = response.text
    return summary


def _print_json(data: dict[str, Any]) -> None:
    json.dump(data, sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def _pretty_print(response: httpx.Response, output: str | None) -> None:
    print(f"HTTP {response.status_code} {response.reason_phrase}")
    for name, value in response.headers.items():
        print(f"{name}: {value}")
    print()
    if output:
        print(f"[body written to {output}]")
    else:
        print(response.text)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging("DEBUG" if args.verbose else None)

    try:
        headers = parse_header_args(args.header)
    except ValueError as exc:
        parser.error(str(exc))

    settings: HttpSettings = load_http_settings()
    if args.timeout is not None:
        settings.timeout = args.timeout

    try:
        with RestBridge(settings=settings) as bridge:
            response = _send(bridge, args, headers)
    except InvalidArgumentError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except (httpx.HTTPError, OSError) as exc:
        reason = error_category_to_reason(categorize_exception(exc))
        print(f"error: {reason}: {exc}", file=sys.stderr)
        return 1

    if args.json:
        _print_json(_summary(response, args.output))
    else:
        _pretty_print(response, args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
