"""Command line interface for the bookstore directory."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .geolocate import FixedLocator, IpApiLocator, Locator, NominatimLocator
from .models import Coordinates
from .parser import CsvReadError, parse_bookstores
from .pipeline import load_bookstores, write_stores
from .search import SearchIndex, StoreFilters, get_search_suggestions, search_stores
from .settings import DirectorySettings

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    # HTTP connection chatter from the location providers
    logging.getLogger("urllib3").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _coordinates(value: str) -> Coordinates:
    try:
        lat, lng = (float(part) for part in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected LAT,LNG but got {value!r}") from None
    return Coordinates(lat=lat, lng=lng)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Load, search and export a bookstore directory CSV")
    parser.add_argument("--config", type=Path, help="Optional JSON file overriding settings")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    commands = parser.add_subparsers(dest="command", required=True)

    parse_cmd = commands.add_parser("parse", help="Validate a CSV file and list rejected rows")
    parse_cmd.add_argument("csv_path", type=Path)

    suggest_cmd = commands.add_parser("suggest", help="Print store name suggestions for a query")
    suggest_cmd.add_argument("csv_path", type=Path)
    suggest_cmd.add_argument("query")

    search_cmd = commands.add_parser("search", help="Search and filter bookstores")
    search_cmd.add_argument("csv_path", type=Path)
    search_cmd.add_argument("--query", default="", help="Fuzzy text matched against name and address")
    search_cmd.add_argument("--has-website", action="store_true", help="Only stores with a website")
    search_cmd.add_argument("--min-rating", type=float, default=0.0, help="Minimum rating")
    search_cmd.add_argument("--province", default=None, help="Exact province value, e.g. ON")
    search_cmd.add_argument("--max-distance", type=float, default=None, help="Maximum distance in km")
    origin = search_cmd.add_mutually_exclusive_group()
    origin.add_argument("--near", type=_coordinates, help="Your location as LAT,LNG")
    origin.add_argument("--near-address", help="Your location as a street address")
    origin.add_argument("--locate-ip", action="store_true", help="Approximate your location from your IP")
    search_cmd.add_argument("--open-weekends", action="store_true", help="Only stores open on weekends")
    search_cmd.add_argument("--open-now", action="store_true", help="Only stores open right now")
    search_cmd.add_argument("--limit", type=int, default=None, help="Maximum number of results to print")

    export_cmd = commands.add_parser("export", help="Write processed bookstores as JSON or CSV")
    export_cmd.add_argument("csv_path", type=Path)
    export_cmd.add_argument("output", type=Path)

    return parser.parse_args(argv)


def load_config(path: Path | None) -> Dict[str, Any]:
    """Read settings overrides from a JSON object keyed by settings section."""

    if path is None:
        return {}
    with path.open("r", encoding="utf-8") as handle:
        config = json.load(handle)
    if not isinstance(config, dict):
        raise ValueError(f"Config file {path} must hold a JSON object, got {type(config).__name__}")
    return config


def build_settings(args: argparse.Namespace) -> DirectorySettings:
    settings = DirectorySettings.from_mapping(load_config(args.config))
    settings.ingestion.csv_path = str(args.csv_path)
    return settings


def _locator(args: argparse.Namespace, settings: DirectorySettings) -> Optional[Locator]:
    if args.near is not None:
        return FixedLocator(args.near)
    if args.near_address:
        return NominatimLocator(args.near_address, settings.geolocation)
    if args.locate_ip:
        return IpApiLocator(settings.geolocation)
    return None


def run_parse(settings: DirectorySettings) -> int:
    try:
        result = parse_bookstores(settings.ingestion.csv_path, encoding=settings.ingestion.encoding)
    except CsvReadError as exc:
        print(f"Failed to parse CSV: {exc}")
        return 1

    print(f"Successfully parsed {len(result.records)} bookstores")
    if result.errors:
        print(f"Found {len(result.errors)} errors:")
        for error in result.errors:
            print(f"Row {error.row}:")
            if error.data:
                print("Row data:", json.dumps(error.data, ensure_ascii=False))
            print("Error:", error.error)
            print("---")
    return 0


def run_suggest(settings: DirectorySettings, query: str) -> int:
    stores = load_bookstores(settings)
    index = SearchIndex(settings.search)
    index.build(stores)
    for name in get_search_suggestions(index, stores, query):
        print(name)
    return 0


def run_search(settings: DirectorySettings, args: argparse.Namespace) -> int:
    stores = load_bookstores(settings)
    index = SearchIndex(settings.search)
    index.build(stores)

    filters = StoreFilters(
        has_website=args.has_website,
        min_rating=args.min_rating,
        province=args.province,
        max_distance=args.max_distance,
        open_weekends=args.open_weekends,
        open_now=args.open_now,
    )
    results = asyncio.run(
        search_stores(
            index,
            stores,
            args.query,
            filters,
            locator=_locator(args, settings),
            location_timeout=settings.geolocation.timeout,
        )
    )

    if results.skipped_filters:
        print(f"Note: location unavailable, ignored filters: {', '.join(results.skipped_filters)}")
    shown = results.stores if args.limit is None else results.stores[: args.limit]
    print(f"Found {len(results)} bookstores")
    for store in shown:
        rating = f" ({store.rating:.1f})" if store.rating is not None else ""
        print(f"{store.name}{rating} | {store.formatted_address}")
    return 0


def run_export(settings: DirectorySettings, output: Path) -> int:
    stores = load_bookstores(settings)
    write_stores(stores, output)
    print(f"Exported {len(stores)} bookstores to {output}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)

    try:
        settings = build_settings(args)
    except (OSError, ValueError) as exc:
        logger.error("Could not load config: %s", exc)
        return 1

    if args.command == "parse":
        return run_parse(settings)
    try:
        if args.command == "suggest":
            return run_suggest(settings, args.query)
        if args.command == "search":
            return run_search(settings, args)
        return run_export(settings, args.output)
    except CsvReadError as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
