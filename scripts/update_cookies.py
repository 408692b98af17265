#!/usr/bin/env python3
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from nf_metadata.client.gateway_client import DEFAULT_GATEWAY_URL, GatewayRequestError, HttpGatewayClient
from nf_metadata.utils.env import load_env


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="update_cookies",
        description="Rotate the upstream session cookies stored by the gateway.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--cookies", help="Cookie header value.")
    source.add_argument("--cookies-file", type=Path, help="File containing the cookie header value.")
    parser.add_argument(
        "--gateway-url",
        default=None,
        help=f"Gateway base URL (defaults to $NF_METADATA_GATEWAY_URL, then {DEFAULT_GATEWAY_URL}).",
    )
    parser.add_argument("--api-key", default=None, help="Gateway API key (defaults to $API_KEY).")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv if argv is not None else sys.argv[1:])
    load_env()
    gateway_url = args.gateway_url or (os.getenv("NF_METADATA_GATEWAY_URL") or "").strip() or DEFAULT_GATEWAY_URL

    api_key = args.api_key or (os.getenv("API_KEY") or "").strip()
    if not api_key:
        print("API key required (--api-key or API_KEY).", file=sys.stderr)
        return 2

    cookies = args.cookies if args.cookies is not None else args.cookies_file.read_text(encoding="utf-8").strip()

    try:
        response = HttpGatewayClient(gateway_url).update_cookies(cookies, api_key=api_key)
    except GatewayRequestError as exc:
        print(f"ERROR {exc}", file=sys.stderr)
        return 1

    if not response.ok:
        print(f"ERROR HTTP {response.status_code}: {response.error_message or 'update failed'}", file=sys.stderr)
        return 1
    print(response.payload.get("message") or "Cookies updated.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
