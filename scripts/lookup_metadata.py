#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import datetime

from nf_metadata.client.gateway_client import DEFAULT_GATEWAY_URL, HttpGatewayClient
from nf_metadata.client.orchestrator import SearchOrchestrator, SearchState, SearchStatus
from nf_metadata.client.state_store import JsonStateStore
from nf_metadata.client.theme import ThemePreference
from nf_metadata.models.entity import MetadataEntity, capability_labels
from nf_metadata.utils.env import load_env


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="lookup_metadata",
        description="Look up title metadata through the gateway (comma-separated ids compare up to 4 titles).",
    )
    parser.add_argument("query", nargs="?", default="", help="Title id, or comma-separated ids for a batch.")
    parser.add_argument("--batch", action="store_true", help="Treat the query as a batch even without commas.")
    parser.add_argument("--url", default="", help="Shareable URL to start from; its ?v= id is looked up.")
    parser.add_argument(
        "--gateway-url",
        default=None,
        help=f"Gateway base URL (defaults to $NF_METADATA_GATEWAY_URL, then {DEFAULT_GATEWAY_URL}).",
    )
    parser.add_argument("--state-dir", default=None, help="Directory for history/analytics/theme state.")
    parser.add_argument("--json", action="store_true", help="Print the raw gateway JSON for a single lookup.")
    parser.add_argument("--history", nargs="?", const="", default=None, help="List history, optionally filtered.")
    parser.add_argument("--clear-history", action="store_true", help="Clear search history.")
    parser.add_argument("--analytics", action="store_true", help="Print response-time analytics.")
    parser.add_argument("--toggle-theme", action="store_true", help="Toggle the saved dark/light theme.")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")
    return parser.parse_args(argv)


def _describe(entity: MetadataEntity) -> str:
    parts = [f"{entity.title} ({entity.latest_year or '?'})", f"id={entity.video_id}"]
    if entity.type_name:
        parts.append(f"type={entity.type_name}")
    if entity.runtime_display:
        parts.append(f"runtime={entity.runtime_display}")
    advisory = entity.content_advisory
    if advisory and advisory.certification_value:
        parts.append(f"rating={advisory.certification_value}")
    parts.append(f"available={'yes' if entity.is_available else 'no'}")
    if entity.is_upcoming():
        parts.append(f"starts={entity.availability_start_time}")
    labels = capability_labels(entity)
    if labels:
        parts.append(f"quality={', '.join(labels)}")
    return " ".join(parts)


def _print_state(state: SearchState, orchestrator: SearchOrchestrator, *, as_json: bool) -> int:
    if state.status is SearchStatus.ERROR:
        print(f"ERROR {state.error}", file=sys.stderr)
        return 1
    if state.status is not SearchStatus.SUCCESS:
        return 0
    if state.result is not None:
        if as_json and state.raw is not None:
            print(json.dumps(state.raw, indent=2, ensure_ascii=False))
        else:
            print(f"FOUND {_describe(state.result)}")
            print(f"URL {orchestrator.url_state.url}")
    for entity in state.comparison:
        print(f"COMPARE {_describe(entity)}")
    budget = orchestrator.rate_budget.budget
    print(f"RATE {budget.remaining}/{budget.limit} requests{' (low)' if budget.is_low else ''}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv if argv is not None else sys.argv[1:])
    load_env()
    gateway_url = args.gateway_url or (os.getenv("NF_METADATA_GATEWAY_URL") or "").strip() or DEFAULT_GATEWAY_URL
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    store = JsonStateStore(args.state_dir)
    orchestrator = SearchOrchestrator.from_state_dir(
        HttpGatewayClient(gateway_url),
        str(store.root),
        url=args.url,
    )

    if args.toggle_theme:
        print(f"THEME {ThemePreference(store).toggle()}")

    if args.clear_history:
        orchestrator.clear_history()
        print("History cleared.")

    exit_code = 0
    if args.query:
        state = orchestrator.submit(args.query, batch_mode=args.batch)
        exit_code = _print_state(state, orchestrator, as_json=args.json)
    elif args.url:
        state = orchestrator.start()
        exit_code = _print_state(state, orchestrator, as_json=args.json)

    if args.history is not None:
        for entry in orchestrator.filter_history(args.history):
            when = datetime.fromtimestamp(entry.timestamp / 1000).strftime("%Y-%m-%d %H:%M")
            print(f"HISTORY {entry.id} {entry.title!r} {when}")

    if args.analytics:
        window = orchestrator.analytics.window
        print(f"ANALYTICS total={window.total_searches} avg_ms={window.avg_response_time}")
        for recent in window.recent_searches:
            print(f"RECENT {recent.id} {recent.time}ms")

    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
