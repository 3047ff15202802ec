#!/usr/bin/env python3
"""
Manage the position opening search index.

Creates, drops and rebuilds the index, imports posting records from a JSON
file, purges expired postings and runs ad-hoc searches.

Usage:
    python scripts/manage_position_index.py create
    python scripts/manage_position_index.py delete
    python scripts/manage_position_index.py recreate
    python scripts/manage_position_index.py import postings.json
    python scripts/manage_position_index.py purge-expired [--as-of 2024-01-31]
    python scripts/manage_position_index.py search "nurse jobs in Arlington, VA" [--size 5] [--hl]
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path

project_root = Path(__file__).parent.parent
services_path = project_root / "services"
sys.path.insert(0, str(services_path))

from position_openings import PositionOpeningService, PositionSearchError  # noqa: E402
from shared import SearchConfig, configure_logging  # noqa: E402

logger = logging.getLogger(__name__)


def load_records(path: Path) -> list[dict]:
    """Load posting records from a JSON list or an object with a "records" list."""
    with open(path, encoding="utf-8") as f:
        payload = json.load(f)
    if isinstance(payload, dict):
        payload = payload.get("records", [])
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a JSON list of records")
    return payload


def run_command(service: PositionOpeningService, args: argparse.Namespace) -> int:
    """Run one subcommand. Returns the process exit code."""
    if args.command == "create":
        if not service.create_index():
            logger.info("Index already exists")
    elif args.command == "delete":
        if not service.delete_index():
            logger.info("Index did not exist")
    elif args.command == "recreate":
        service.delete_index()
        service.create_index()
    elif args.command == "import":
        if args.recreate:
            service.delete_index()
        if not service.index_exists():
            service.create_index()
        count = service.import_records(load_records(args.file))
        logger.info(f"Imported {count} record(s) from {args.file}")
    elif args.command == "purge-expired":
        as_of = date.fromisoformat(args.as_of) if args.as_of else None
        removed = service.delete_expired(as_of)
        logger.info(f"Removed {removed} expired record(s)")
    elif args.command == "search":
        if args.organizations_from_index:
            service.use_index_organizations()
        results = service.search_for(
            {
                "query": args.query,
                "organization_id": args.organization_id,
                "size": args.size,
                "from": args.offset,
                "hl": args.hl,
            }
        )
        print(json.dumps(results, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage the position opening search index")
    parser.add_argument("--index", help="Index name (default: from POSITION_INDEX_NAME env var)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("create", help="Create the index if it does not exist")
    subparsers.add_parser("delete", help="Drop the index and all its documents")
    subparsers.add_parser("recreate", help="Drop and create the index")

    import_parser = subparsers.add_parser("import", help="Import records from a JSON file")
    import_parser.add_argument("file", type=Path, help="JSON file with posting records")
    import_parser.add_argument(
        "--recreate", action="store_true", help="Drop the index before importing"
    )

    purge_parser = subparsers.add_parser("purge-expired", help="Remove postings that have ended")
    purge_parser.add_argument("--as-of", help="Cutoff date YYYY-MM-DD (default: today)")

    search_parser = subparsers.add_parser("search", help="Run a search and print the results")
    search_parser.add_argument("query", nargs="?", default="", help="Free-text query")
    search_parser.add_argument("--organization-id", help="Organization id prefix filter")
    search_parser.add_argument("--size", type=int, help="Number of results")
    search_parser.add_argument("--from", dest="offset", type=int, help="Result offset")
    search_parser.add_argument("--hl", action="store_true", help="Highlight matched title words")
    search_parser.add_argument(
        "--organizations-from-index",
        action="store_true",
        help="Resolve organization names against the organizations in the index",
    )
    return parser


def main():
    """Main entry point."""
    args = build_parser().parse_args()
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    config = SearchConfig.from_env()
    if args.index:
        config = replace(config, index_name=args.index)

    try:
        service = PositionOpeningService.from_config(config)
        sys.exit(run_command(service, args))
    except (PositionSearchError, ValueError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
