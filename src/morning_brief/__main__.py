# ABOUTME: CLI entry point for the Morning Brief briefing service.
# ABOUTME: Provides subcommands: generate, backfill, daily, history, usage.

import argparse
import asyncio
import logging
import sys
from collections.abc import Awaitable
from datetime import date
from typing import TypeVar

import structlog

from morning_brief.config import get_settings

T = TypeVar("T")


def configure_logging() -> None:
    """Configure structlog for console or JSON output."""
    settings = get_settings()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
        )
    else:
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
                structlog.processors.add_log_level,
                structlog.dev.ConsoleRenderer(colors=True),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
        )


def _run(coro: Awaitable[T]) -> T:
    """Run a coroutine with database setup and teardown around it."""
    from morning_brief.db.session import close_db, init_db

    async def runner() -> T:
        await init_db()
        try:
            return await coro
        finally:
            await close_db()

    return asyncio.run(runner())


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid date: {value} (expected YYYY-MM-DD)") from e


def cmd_generate(args: argparse.Namespace) -> int:
    """Generate the briefing for today or a given date."""
    from morning_brief.pipeline.generator import BriefingGenerator, NoArticlesFoundError

    log = structlog.get_logger()
    log.info("cmd_generate_start", date=args.date.isoformat() if args.date else None)

    try:
        with BriefingGenerator() as generator:
            result = _run(
                generator.generate(args.date, force=args.force, voice=args.voice, model=args.model)
            )
    except NoArticlesFoundError:
        log.error("cmd_generate_no_articles")
        return 1
    except Exception:
        log.exception("cmd_generate_failed")
        return 1

    if result.status == "skipped":
        print(f"Briefing for {result.date.isoformat()} already exists (use --force to regenerate)")
        return 0

    briefing = result.briefing
    print(f"\n=== Morning Brief {result.date.isoformat()} ===\n")
    print(f"Headline: {briefing.full_briefing.headline}")
    print(f"Stories:  {briefing.full_briefing.story_count}")
    print(f"Duration: {briefing.full_briefing.duration}")
    print(f"Audio:    {briefing.full_briefing.audio_url or '(none)'}")
    for brief in briefing.category_briefs:
        audio = "audio" if brief.audio_url else "no audio"
        print(f"  {brief.emoji} {brief.display_name}: {brief.story_count} stories, {audio}")
    print(f"\nGenerated in {result.processing_time}s\n")

    log.info("cmd_generate_complete")
    return 0


def cmd_backfill(args: argparse.Namespace) -> int:
    """Generate briefings for past dates, skipping existing ones."""
    from morning_brief.pipeline.backfill import date_range, generate_range
    from morning_brief.pipeline.generator import BriefingGenerator

    log = structlog.get_logger()

    if args.dates:
        dates = args.dates
    elif args.start and args.end:
        try:
            dates = date_range(args.start, args.end)
        except ValueError as e:
            log.error("cmd_backfill_invalid_range", error=str(e))
            return 1
    else:
        log.error("cmd_backfill_no_dates", hint="Use --dates or --start with --end")
        return 1

    log.info("cmd_backfill_start", dates=len(dates))
    with BriefingGenerator() as generator:
        result = _run(generate_range(generator, dates))

    for item in result.items:
        print(f"  {item.date.isoformat()}  {item.status:<8} {item.message or ''}")
    summary = result.summary()
    print(
        f"\nTotal: {summary['total']}  Successful: {summary['successful']}  "
        f"Skipped: {summary['skipped']}  Failed: {summary['failed']}\n"
    )
    return 1 if summary["failed"] else 0


def cmd_daily(_args: argparse.Namespace) -> int:
    """Run the scheduled daily job: generate today's briefing and send push notifications."""
    from morning_brief.pipeline.daily import run_daily_job
    from morning_brief.pipeline.generator import BriefingGenerator

    log = structlog.get_logger()
    log.info("cmd_daily_start")

    try:
        with BriefingGenerator() as generator:
            result = _run(run_daily_job(generator))
    except Exception:
        log.exception("cmd_daily_failed")
        return 1

    log.info(
        "cmd_daily_complete",
        skipped=result.skipped,
        pushed=result.push.sent if result.push else 0,
    )
    print(result.message)
    return 0


def cmd_history(args: argparse.Namespace) -> int:
    """List the most recent stored briefings."""
    from morning_brief.services.briefing_store import get_briefing_store

    store = get_briefing_store()
    entries = _run(store.history(args.limit))

    if not entries:
        print("No briefings stored yet.")
        return 0

    print("\n=== Briefing History ===\n")
    for entry in entries:
        print(
            f"  {entry.date.isoformat()}  {entry.duration:>5}  "
            f"{entry.story_count:>2} stories  {entry.headline}"
        )
    print()
    return 0


def cmd_usage(_args: argparse.Namespace) -> int:
    """Show ElevenLabs character quota."""
    from morning_brief.tts.elevenlabs import ElevenLabsClient

    with ElevenLabsClient() as client:
        usage = client.get_usage()
        daily = client.settings.elevenlabs_daily_characters

    if usage is None:
        print("ElevenLabs not configured or unable to fetch usage.")
        return 1

    print("\n=== ElevenLabs Usage ===\n")
    print(f"Used:      {usage.character_count:,} / {usage.character_limit:,}")
    print(f"Remaining: {usage.remaining_characters:,} ({100 - usage.percent_used}%)")
    print(f"Estimated days remaining: {max(usage.remaining_characters, 0) // daily}\n")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="morning_brief",
        description="Morning Brief - daily audio news briefing generator",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # generate command
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate and store the briefing for a date",
    )
    generate_parser.add_argument(
        "--date",
        type=_parse_date,
        help="Briefing date (YYYY-MM-DD). Defaults to today.",
    )
    generate_parser.add_argument(
        "--force",
        action="store_true",
        help="Regenerate even if a briefing exists for the date",
    )
    generate_parser.add_argument(
        "--voice",
        type=str,
        help="ElevenLabs voice name or ID for the full briefing",
    )
    generate_parser.add_argument(
        "--model",
        type=str,
        help="ElevenLabs model name or ID (flash, multilingual, turbo)",
    )

    # backfill command
    backfill_parser = subparsers.add_parser(
        "backfill",
        help="Generate briefings for past dates",
    )
    backfill_parser.add_argument(
        "--dates",
        type=_parse_date,
        nargs="+",
        help="Explicit dates (YYYY-MM-DD)",
    )
    backfill_parser.add_argument(
        "--start",
        type=_parse_date,
        help="First date of an inclusive range (YYYY-MM-DD)",
    )
    backfill_parser.add_argument(
        "--end",
        type=_parse_date,
        help="Last date of an inclusive range (YYYY-MM-DD)",
    )

    # daily command
    subparsers.add_parser(
        "daily",
        help="Run the scheduled daily job (generate and notify)",
    )

    # history command
    history_parser = subparsers.add_parser(
        "history",
        help="List recent briefings",
    )
    history_parser.add_argument(
        "--limit",
        type=int,
        default=14,
        help="Number of briefings to show (default: 14)",
    )

    # usage command
    subparsers.add_parser(
        "usage",
        help="Show ElevenLabs character quota",
    )

    return parser


def main() -> int:
    """Main entry point."""
    configure_logging()

    parser = create_parser()
    args = parser.parse_args()

    if args.command is None:
        # Default behavior: generate today's briefing
        args.date = None
        args.force = False
        args.voice = None
        args.model = None
        return cmd_generate(args)

    commands = {
        "generate": cmd_generate,
        "backfill": cmd_backfill,
        "daily": cmd_daily,
        "history": cmd_history,
        "usage": cmd_usage,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
