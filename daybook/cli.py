"""
Command-line day book.

Usage:
    # Today's day book for the society picked in the app
    python -m daybook

    # A given society and date
    python -m daybook --society 3f1c... --date 2024-01-15

    # Export as HTML
    python -m daybook --date 2024-01-15 --format html --output daybook.html

    # Carry cash forward from the start of the financial year
    python -m daybook --opening-mode running

Exit codes: 0 ok, 1 load failure, 2 no society selected / bad configuration.
"""
from __future__ import annotations
import argparse
import sys
from datetime import date
from pathlib import Path
from typing import Optional
from loguru import logger
from adapters.adapter_types import LedgerSource
from .config import DayBookConfig, SOURCES, OPENING_MODES
from .report import render_day_book, FORMATS
from .selection import read_selected_society
from .session import DayBookContext, DayBookSession, LoadOutcome

EXIT_OK = 0
EXIT_LOAD_FAILURE = 1
EXIT_NOT_SELECTED = 2
EXIT_CONFIG = 2


def build_source(config: DayBookConfig) -> LedgerSource:
    """Create the configured read surface."""
    if config.source == "postgres":
        from adapters.postgres.adapter import PostgresAdapter
        return PostgresAdapter(config.db_url, schema=config.db_schema)
    from adapters.supabase_rest.adapter import SupabaseRESTAdapter
    return SupabaseRESTAdapter(
        config.supabase_url,
        config.supabase_key,
        access_token=config.access_token,
        timeout=config.request_timeout,
    )


def setup_logging(config: DayBookConfig, verbose: bool = False) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else config.log_level.upper())
    if config.log_file:
        logger.add(config.log_file, level="DEBUG", rotation="10 MB")


def parse_arguments(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="daybook",
        description="Show the day book (receipts, payments, closing cash) of a society",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--society",
        help="Society id (default: the society selected in the app)",
    )
    parser.add_argument(
        "--date",
        type=lambda s: date.fromisoformat(s),
        default=None,
        help="Date in YYYY-MM-DD format (default: today)",
    )
    parser.add_argument(
        "--source",
        choices=SOURCES,
        help="Read through Supabase REST or a direct Postgres connection",
    )
    parser.add_argument(
        "--format",
        choices=FORMATS,
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Write the report to this file instead of stdout",
    )
    parser.add_argument(
        "--opening-mode",
        choices=OPENING_MODES,
        help="static: society opening cash; running: carried forward within the financial year",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None, config: Optional[DayBookConfig] = None) -> int:
    args = parse_arguments(argv)
    config = config or DayBookConfig.from_env()
    if args.source:
        config.source = args.source
    if args.opening_mode:
        config.opening_mode = args.opening_mode

    setup_logging(config, args.verbose)

    errors = config.validate()
    if errors:
        for err in errors:
            print(f"Error: {err}", file=sys.stderr)
        return EXIT_CONFIG

    society_id = args.society or read_selected_society(config.state_file)
    context = DayBookContext.for_day(society_id, args.date)

    def notify(message: str) -> None:
        print(f"✗ {message}", file=sys.stderr)

    def not_selected() -> None:
        print(
            "✗ No society selected. Pick one in the app or pass --society "
            f"(local storage: {config.state_file})",
            file=sys.stderr,
        )

    source = build_source(config)
    try:
        with DayBookSession(
            source,
            notify=notify,
            on_not_selected=not_selected,
            opening_mode=config.opening_mode,
        ) as session:
            outcome = session.load(context)
            if outcome is LoadOutcome.NOT_SELECTED:
                return EXIT_NOT_SELECTED
            if outcome is not LoadOutcome.OK:
                if session.last_error is not None:
                    logger.debug(f"Load failure detail: {session.last_error}")
                return EXIT_LOAD_FAILURE
            text = render_day_book(session.day_book, args.format, grouping=config.amount_grouping)
    finally:
        close = getattr(source, "close", None)
        if close is not None:
            close()

    if args.output:
        args.output.write_text(text, encoding="utf-8")
        logger.info(f"Day book written to {args.output}")
    else:
        sys.stdout.write(text)
    return EXIT_OK
