"""CarbonTrackr command line entry point.

Usage:
    python -m carbontrackr [OPTIONS] COMMAND [ARGS]

Options:
    --config PATH    Path to YAML config file
    --profile NAME   Profile name (dev, prod, test)
    --json           Print results as JSON
    --help           Show this help message
    --version        Show version
"""

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pymongo.errors import PyMongoError

from . import __version__
from .analytics import (
    CarbonAnalyticsError,
    CarbonAnalyticsService,
    DashboardAggregates,
    LeaderboardEntry,
    TimeWindow,
    WeeklySummary,
    parse_week_start,
)
from .config import CarbonConfig
from .config.loader import load_config
from .config.profiles import detect_profile
from .storage import InMemoryAnalyticsStore, MongoAnalyticsStore, MongoStorageClient

EXIT_CONFIG_ERROR = 1
EXIT_BUSINESS_ERROR = 2
EXIT_STORAGE_ERROR = 3


def setup_logging(level: str) -> None:
    """Configure logging based on config."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="carbontrackr",
        description="CarbonTrackr - carbon footprint analytics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  carbontrackr dashboard --user alice          # All-time totals by category
  carbontrackr current --user alice            # Live view of this week
  carbontrackr summary --user alice --week 2024-01-15
  carbontrackr generate --user alice           # Summarize last week
  carbontrackr --profile prod leaderboard --limit 10

Environment:
  CARBONTRACKR_PROFILE       Set profile (dev, prod, test)
  CARBONTRACKR_MONGODB_URI   Override the MongoDB connection URI
""",
    )

    parser.add_argument("--config", type=Path, help="Path to YAML config file", metavar="PATH")
    parser.add_argument(
        "--profile",
        choices=["dev", "prod", "test"],
        help="Configuration profile to use",
    )
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument(
        "--version",
        action="version",
        version=f"CarbonTrackr v{__version__}",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    dashboard = commands.add_parser("dashboard", help="Totals by category for a user")
    dashboard.add_argument("--user", required=True)
    dashboard.add_argument("--days", type=int, help="Only the trailing number of days")

    current = commands.add_parser("current", help="Live summary of the current week")
    current.add_argument("--user", required=True)

    summary = commands.add_parser("summary", help="Summary of a given week")
    summary.add_argument("--user", required=True)
    summary.add_argument("--week", required=True, help="Week start (Monday), YYYY-MM-DD")

    history = commands.add_parser("summaries", help="List generated summaries")
    history.add_argument("--user", required=True)

    generate = commands.add_parser("generate", help="Generate last week's summary")
    generate.add_argument("--user", required=True)

    leaderboard = commands.add_parser("leaderboard", help="Rank users by emissions")
    leaderboard.add_argument("--days", type=int, help="Only the trailing number of days")
    leaderboard.add_argument("--limit", type=int, help="Maximum entries to show")

    return parser.parse_args(argv)


def format_summary(summary: WeeklySummary) -> str:
    """Render a weekly summary as plain text."""
    label = "live" if summary.is_live else "generated"
    lines = [
        f"Week {summary.week_start} - {summary.week_end} ({label})",
        f"  Total: {summary.total_emissions:.2f} kg CO2e over "
        f"{summary.activities_count} activities",
    ]
    for name, value in summary.category_totals.totals_dict().items():
        count = summary.category_totals.counts_dict()[name]
        lines.append(f"    {name:<10} {value:>8.2f} kg  ({count})")

    if summary.highest_category:
        lines.append(f"  Highest: {summary.highest_category.category.value}")
    if summary.lowest_category:
        lines.append(f"  Lowest: {summary.lowest_category.category.value}")

    progress = summary.reduction_target
    if progress:
        unit = "%" if progress.target_type.value == "percentage" else " kg"
        status = "met" if progress.target_met else "in progress"
        lines.append(f"  Target: {progress.target_value:g}{unit} reduction ({status})")
        if progress.reduction_achieved is not None:
            lines.append(f"    Achieved: {progress.reduction_achieved:+.2f}{unit}")
        if progress.progress_percentage is not None:
            lines.append(f"    Progress: {progress.progress_percentage:.0f}%")

    if summary.personalized_tip:
        tip = summary.personalized_tip
        lines.append(f"  Tip ({tip.tip_type.value}, {tip.category.value}): {tip.message}")
    return "\n".join(lines)


def format_dashboard(aggregates: DashboardAggregates) -> str:
    """Render dashboard aggregates as plain text."""
    lines = [
        f"Dashboard for {aggregates.user_id}",
        f"  Total: {aggregates.grand_total:.2f} kg CO2e over "
        f"{aggregates.activity_count} activities",
        f"  Average per activity: {aggregates.average_per_activity:.2f} kg",
    ]
    if aggregates.top_category:
        lines.append(f"  Top category: {aggregates.top_category.category.value}")
    for name, value in aggregates.category_totals.totals_dict().items():
        lines.append(f"    {name:<10} {value:>8.2f} kg")
    return "\n".join(lines)


def format_leaderboard(entries: list[LeaderboardEntry]) -> str:
    """Render leaderboard entries as plain text."""
    if not entries:
        return "No participants yet."
    lines = [f"{'Rank':>4}  {'User':<20} {'kg CO2e':>10} {'Activities':>10}"]
    for entry in entries:
        lines.append(
            f"{entry.rank:>4}  {entry.username:<20} "
            f"{entry.total_emissions:>10.2f} {entry.activity_count:>10}"
        )
    return "\n".join(lines)


def _emit(result: Any, as_json: bool, text: str) -> None:
    if as_json:
        if isinstance(result, list):
            payload: Any = [item.to_dict() for item in result]
        else:
            payload = result.to_dict()
        print(json.dumps(payload, default=str, indent=2))
    else:
        print(text)


def run_command(
    args: argparse.Namespace, service: CarbonAnalyticsService, config: CarbonConfig
) -> None:
    """Execute one CLI command against the analytics service.

    Raises:
        CarbonAnalyticsError: For expected business outcomes.
    """
    if args.command == "dashboard":
        window = TimeWindow.last_days(args.days) if args.days else None
        aggregates = service.get_dashboard_aggregates(args.user, window)
        _emit(aggregates, args.json, format_dashboard(aggregates))

    elif args.command == "current":
        summary = service.get_current_week_view(args.user)
        _emit(summary, args.json, format_summary(summary))

    elif args.command == "summary":
        summary = service.get_week_view(args.user, parse_week_start(args.week))
        _emit(summary, args.json, format_summary(summary))

    elif args.command == "summaries":
        summaries = service.list_summaries(args.user)
        text = "\n\n".join(format_summary(s) for s in summaries) or "No summaries generated yet."
        _emit(summaries, args.json, text)

    elif args.command == "generate":
        summary = service.generate_previous_week_summary(args.user)
        _emit(summary, args.json, format_summary(summary))

    elif args.command == "leaderboard":
        window = TimeWindow.last_days(args.days) if args.days else None
        limit = args.limit if args.limit is not None else config.leaderboard.limit
        entries = service.get_leaderboard(window, limit)
        _emit(entries, args.json, format_leaderboard(entries))


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for CarbonTrackr.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    load_dotenv()
    args = parse_args(argv)

    # Load configuration
    try:
        if args.config:
            config = load_config(path=args.config)
        else:
            config = load_config(profile=args.profile or detect_profile().value)
    except FileNotFoundError as e:
        print(f"Error: Config file not found: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except (TypeError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    setup_logging(config.logging.level)
    logger = logging.getLogger("carbontrackr")
    logger.debug("CarbonTrackr v%s, storage backend %s", __version__, config.storage.backend)

    client: MongoStorageClient | None = None
    if config.storage.backend == "memory":
        store: InMemoryAnalyticsStore | MongoAnalyticsStore = InMemoryAnalyticsStore()
    else:
        client = MongoStorageClient(
            uri=config.storage.uri,
            database_name=config.storage.database,
            max_pool_size=config.storage.max_pool_size,
            min_pool_size=config.storage.min_pool_size,
            connect_timeout_ms=config.storage.connect_timeout_ms,
            server_selection_timeout_ms=config.storage.server_selection_timeout_ms,
        )
        store = MongoAnalyticsStore(client)

    try:
        service = CarbonAnalyticsService.from_config(config, store)
    except ValueError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        if client is not None:
            client.connect()
        run_command(args, service, config)

    except CarbonAnalyticsError as e:
        print(f"{e}", file=sys.stderr)
        return EXIT_BUSINESS_ERROR
    except PyMongoError as e:
        logger.error("Storage failure: %s", e)
        return EXIT_STORAGE_ERROR
    finally:
        if client is not None:
            client.disconnect()

    return 0


if __name__ == "__main__":
    sys.exit(main())
