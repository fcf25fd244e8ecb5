"""Command line interface for searching a MISP instance."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, field_validator

from misp_search.config import create_from_config, get_default_config_path, load_config
from misp_search.query import AttributeQuery, EventQuery

logger = logging.getLogger(__name__)

# (flag, query field alias) shared by event and attribute searches
_COMMON_FILTERS = [
    ("--value", "value"),
    ("--type", "type"),
    ("--category", "category"),
    ("--org", "org"),
    ("--tags", "tags"),
    ("--from", "from"),
    ("--to", "to"),
    ("--last", "last"),
    ("--eventid", "eventid"),
    ("--uuid", "uuid"),
]
_EVENT_FILTERS = [
    ("--quickfilter", "quickfilter"),
    ("--with-attachments", "withAttachments"),
    ("--metadata", "metadata"),
]


class CLIArgs(BaseModel):
    """Validated CLI arguments."""

    command: Literal["events", "attributes", "export"]
    config: Path
    verbose: bool = False
    insecure: bool = False
    filters: dict[str, str | int] = {}
    flags: list[str] = []

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v


def build_query(args: CLIArgs) -> EventQuery | AttributeQuery:
    """Turn the parsed filters into the query matching the command."""
    if args.command == "events":
        return EventQuery.model_validate(args.filters)
    return AttributeQuery.model_validate(args.filters)


async def run(args: CLIArgs) -> int:
    """Execute the requested command.

    Args:
        args: Validated CLI arguments.

    Returns:
        Process exit code.
    """
    config = load_config(args.config)
    connection = create_from_config(config, insecure_override=True if args.insecure else None)

    logger.info(f"MISP: {config.protocol}://{config.host}")

    async with connection:
        if args.command == "export":
            lines, err = await connection.text_export(*args.flags)
            if err is not None:
                logger.error(f"Text export failed: {err}")
                return 1
            for line in lines:
                print(line)
            return 0

        response, err = await connection.search(build_query(args))
        if err is not None:
            logger.error(f"Search failed: {err}")
            return 1
        count = 0
        for record in response:
            print(record.model_dump_json(by_alias=True))
            count += 1
        logger.info(f"{count} {args.command} found")
        return 0


def _add_filters(parser: argparse.ArgumentParser, filters: list[tuple[str, str]]) -> None:
    for flag, field in filters:
        parser.add_argument(flag, dest=f"filter:{field}", default=None, metavar="VALUE")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search events and attributes on a MISP instance.")
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML or JSON config file (default: configs/default.yaml)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Log requests at debug level",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        default=False,
        help="Skip TLS certificate verification (overrides config)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    events = commands.add_parser("events", help="Search events")
    _add_filters(events, _COMMON_FILTERS + _EVENT_FILTERS)
    events.add_argument(
        "--searchall",
        dest="filter:searchall",
        type=int,
        default=None,
        help="Search the value in all event fields (1 to enable)",
    )

    attributes = commands.add_parser("attributes", help="Search attributes")
    _add_filters(attributes, _COMMON_FILTERS)

    export = commands.add_parser("export", help="Plain-text attribute export, deduplicated")
    export.add_argument("flags", nargs="+", help="Export path segments, e.g. an attribute type")

    return parser


def main() -> None:
    """Entry point for the CLI."""
    parser = build_parser()
    ns = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
    )

    config_path: Path = ns.config if ns.config else get_default_config_path()
    filters = {
        key.removeprefix("filter:"): value
        for key, value in vars(ns).items()
        if key.startswith("filter:") and value is not None
    }

    try:
        args = CLIArgs(
            command=ns.command,
            config=config_path,
            verbose=ns.verbose,
            insecure=ns.insecure,
            filters=filters,
            flags=getattr(ns, "flags", []),
        )
    except Exception as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        sys.exit(130)
