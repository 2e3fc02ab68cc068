"""Escalation CLI entry points.

This module exposes commands for loading, reprocessing, and reading records.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Sequence

from core.config import EscalationConfig
from core.constants import BUILDING_DOMAIN, TEAM_DOMAIN
from core.errors import EscalationError
from core.types import EscalationFilter, PipelineOutcome
from store.escalation_sdk import EscalationClient
from transforms.timestamps import isoformat_utc


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="escalations", description="Escalation ingest CLI")
    parser.add_argument("--data-root", help="Override ESCALATIONS_DATA_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_load_command(subparsers)
    _add_reprocess_command(subparsers)
    _add_list_command(subparsers)
    _add_quarantine_command(subparsers)
    _add_resolve_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the escalation CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        client = _build_client(args.data_root)
        return _dispatch(parser, client, args)
    except EscalationError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1


def _dispatch(
    parser: argparse.ArgumentParser,
    client: EscalationClient,
    args: argparse.Namespace,
) -> int:
    if args.command == "load":
        return _print_outcomes(client.load(args.source))
    if args.command == "reprocess":
        return _print_outcomes(client.reprocess_all())
    if args.command == "list":
        return _run_list_command(client, args)
    if args.command == "quarantine":
        return _run_quarantine_command(client)
    if args.command == "resolve":
        entity = client.resolve(args.domain, args.text)
        print(f"{entity.code}\t{entity.name}")
        return 0
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(data_root: str | None) -> EscalationClient:
    """Build SDK client with optional data-root override.

    Args:
        data_root: Optional override path.

    Returns:
        Configured SDK client.
    """
    config = EscalationConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return EscalationClient(config)


def _print_outcomes(outcomes: Sequence[PipelineOutcome]) -> int:
    """Print one ``id, state, reason`` row per pipeline outcome."""
    for outcome in outcomes:
        print(f"{outcome.record_id}\t{outcome.state}\t{outcome.reason or '-'}")
    return 0


def _run_list_command(client: EscalationClient, args: argparse.Namespace) -> int:
    """Handle list command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    filter_spec = EscalationFilter(
        start=args.start,
        end=args.end,
        building_code=args.building,
        team=args.team,
        escalator=args.escalator,
        search_text=args.search,
    )
    page = client.query(filter_spec, cursor=args.cursor)
    for record_id, record in page.records:
        print(
            f"{record_id}\t"
            f"{_render_value(record.get('escalationDate'))}\t"
            f"{record.get('buildingCode') or '-'}\t"
            f"{record.get('escalatedTo') or '-'}\t"
            f"{record.get('subject') or ''}"
        )
    if page.next_cursor:
        print(f"next_cursor={page.next_cursor}")
    return 0


def _run_quarantine_command(client: EscalationClient) -> int:
    """Handle quarantine command."""
    for record_id, record in client.quarantined():
        print(f"{record_id}\t{record.get('reason')}\t{_render_value(record.get('checkedAt'))}")
    return 0


def _render_value(value: Any) -> str:
    if isinstance(value, datetime):
        return isoformat_utc(value)
    return "-" if value is None else str(value)


def _parse_datetime_argument(raw_value: str) -> datetime:
    """Parse an ISO-8601 CLI argument."""
    try:
        return datetime.fromisoformat(raw_value)
    except ValueError as error:
        raise argparse.ArgumentTypeError(
            f"invalid ISO-8601 datetime '{raw_value}'"
        ) from error


def _add_load_command(subparsers: Any) -> None:
    """Register load subcommand."""
    parser = subparsers.add_parser("load", help="Write raw records and run the pipeline")
    parser.add_argument("source", help="Source .json/.jsonl file, directory, or s3://bucket/prefix")


def _add_reprocess_command(subparsers: Any) -> None:
    """Register reprocess subcommand."""
    subparsers.add_parser("reprocess", help="Run the pipeline over every stored escalation")


def _add_list_command(subparsers: Any) -> None:
    """Register list subcommand."""
    parser = subparsers.add_parser("list", help="List normalized escalations, newest first")
    parser.add_argument("--start", type=_parse_datetime_argument, help="Inclusive start date")
    parser.add_argument("--end", type=_parse_datetime_argument, help="Exclusive end date")
    parser.add_argument("--building", help="Canonical building code filter")
    parser.add_argument("--team", help="Canonical team code filter")
    parser.add_argument("--escalator", help="Escalator filter")
    parser.add_argument("--search", help="Case-insensitive subject/description search")
    parser.add_argument("--cursor", help="Cursor printed by the previous page")


def _add_quarantine_command(subparsers: Any) -> None:
    """Register quarantine subcommand."""
    subparsers.add_parser("quarantine", help="List quarantined escalations")


def _add_resolve_command(subparsers: Any) -> None:
    """Register resolve subcommand."""
    parser = subparsers.add_parser("resolve", help="Resolve free text to a canonical entity")
    parser.add_argument("domain", choices=(TEAM_DOMAIN, BUILDING_DOMAIN), help="Vocabulary domain")
    parser.add_argument("text", help="Raw team or building text")
