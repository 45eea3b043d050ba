"""
Command-line interface for fieldheat.

This module provides the main entry point for the CLI.
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from typing import Any

from fieldheat import __version__
from fieldheat.cache import WeatherCache
from fieldheat.config import get_settings
from fieldheat.datasources.providers import describe_sources
from fieldheat.exceptions import FieldHeatError, InputError
from fieldheat.flows.backfill import backfill_weather
from fieldheat.flows.compute import heat_units, trial_aggregation
from fieldheat.log import configure_logging
from fieldheat.reference import CROP_PRESETS, get_crop


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        msg = f"not a YYYY-MM-DD date: {value!r}"
        raise argparse.ArgumentTypeError(msg) from None


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="fieldheat",
        description="Weather caching and heat-unit (GDD/CHU) accounting for field trials",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info")
    subparsers.add_parser("sources", help="List weather providers and whether they are configured")
    subparsers.add_parser("crops", help="List crop presets and their base temperatures")
    subparsers.add_parser("cache-stats", help="Show what the weather cache holds")

    # 'gdd' command - heat units for a location
    gdd_parser = subparsers.add_parser("gdd", help="Compute GDD/CHU for a location")
    gdd_parser.add_argument("--location", required=True, help="Location id")
    gdd_parser.add_argument(
        "--year",
        type=int,
        action="append",
        default=[],
        help="Season year (04-15..09-30); repeat for multi-year analysis",
    )
    gdd_parser.add_argument("--start", type=_iso_date, help="Season start (YYYY-MM-DD)")
    gdd_parser.add_argument("--end", type=_iso_date, help="Season end (YYYY-MM-DD)")
    gdd_parser.add_argument(
        "--base-temp",
        type=float,
        default=None,
        help="GDD base temperature in C (default: crop preset or settings)",
    )
    gdd_parser.add_argument("--crop", type=int, default=None, help="Crop preset id (see 'crops')")

    # 'aggregate' command - per-plot heat units for a trial
    agg_parser = subparsers.add_parser("aggregate", help="Per-plot heat units for a trial")
    agg_parser.add_argument("--trial", required=True, help="Trial id")
    agg_parser.add_argument("--base-temp", type=float, default=None, help="GDD base temperature")

    # 'backfill' command - pre-fill the cache from the archive
    backfill_parser = subparsers.add_parser("backfill", help="Backfill the weather cache")
    backfill_parser.add_argument("--start", type=_iso_date, default=None)
    backfill_parser.add_argument("--end", type=_iso_date, default=None)
    backfill_parser.add_argument(
        "--force",
        action="store_true",
        help="Backfill locations even if done within the last day",
    )

    return parser


def cmd_info(args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Database: {settings.database_url}")
    print(f"Field book: {settings.fieldbook_path}")
    if getattr(args, "debug", False):
        print(f"Debug mode enabled. Settings: {settings}")
    return 0


def cmd_sources(_args: argparse.Namespace) -> int:
    """Handle the 'sources' command."""
    for info in describe_sources(get_settings()):
        state = "configured" if info["configured"] else "not configured"
        key = "key required" if info["requires_key"] else "no key"
        print(f"{info['id']:<12} {info['name']:<20} {state} ({key})")
    return 0


def cmd_crops(_args: argparse.Namespace) -> int:
    """Handle the 'crops' command."""
    for crop in CROP_PRESETS:
        index = "CHU" if crop.use_chu else "GDD"
        print(f"{crop.id:>2}  {crop.crop_name:<16} base {crop.base_temp:>4.1f} C  ({index})")
    return 0


def cmd_cache_stats(_args: argparse.Namespace) -> int:
    """Handle the 'cache-stats' command."""
    cache = WeatherCache.from_url(get_settings().database_url)
    print(json.dumps(cache.stats().to_dict(), indent=2))
    return 0


def _seasons_from_args(args: argparse.Namespace) -> list[dict[str, Any]]:
    seasons: list[dict[str, Any]] = [{"year": year} for year in args.year]
    if args.start or args.end:
        if not (args.start and args.end):
            msg = "--start and --end must be given together"
            raise InputError(msg)
        seasons.append({"start_date": args.start.isoformat(), "end_date": args.end.isoformat()})
    if not seasons:
        msg = "Give at least one --year or a --start/--end range"
        raise InputError(msg)
    return seasons


def cmd_gdd(args: argparse.Namespace) -> int:
    """Handle the 'gdd' command."""
    base_temp = args.base_temp
    if args.crop is not None:
        crop = get_crop(args.crop)
        if crop is None:
            msg = f"Unknown crop preset {args.crop}"
            raise InputError(msg)
        if base_temp is None:
            base_temp = crop.base_temp

    report = heat_units(args.location, _seasons_from_args(args), base_temp)
    summary = report["summary"]
    print(
        f"Average over {summary['seasons_count']} season(s): "
        f"{summary['avg_gdd']:.0f} GDD, {summary['avg_chu']:.0f} CHU, "
        f"{summary['avg_precipitation']:.0f} mm"
    )
    return 0


def cmd_aggregate(args: argparse.Namespace) -> int:
    """Handle the 'aggregate' command."""
    result = trial_aggregation(args.trial, args.base_temp)
    for plot in result["plots"]:
        print(
            f"{plot['plot_id']:<12} {plot['gdd_total']:>8.1f} GDD {plot['chu_total']:>8.1f} CHU"
            f"  (days {plot['emergence_day_offset']}-{plot['maturity_day_offset']})"
        )
    for excluded in result["excluded"]:
        print(f"{excluded['plot_id']:<12} excluded: {excluded['reason']} {excluded['detail']}")
    return 0


def cmd_backfill(args: argparse.Namespace) -> int:
    """Handle the 'backfill' command."""
    results = backfill_weather(start=args.start, end=args.end, force=args.force)
    failed = sum(len(r["failed_chunks"]) for r in results.values())
    print(f"Done. {len(results)} location(s) backfilled, {failed} chunk(s) failed.")
    return 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging(get_settings())

    commands = {
        "info": cmd_info,
        "sources": cmd_sources,
        "crops": cmd_crops,
        "cache-stats": cmd_cache_stats,
        "gdd": cmd_gdd,
        "aggregate": cmd_aggregate,
        "backfill": cmd_backfill,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1
    try:
        return handler(args)
    except FieldHeatError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
