"""Logbook command line - main entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import (
    Loaded,
    LogbookConfig,
    NotFound,
    check_save_path,
    config_file_path,
    default_logbook_dir,
    load_config,
    resolve_logbook_dir,
    save_config,
)
from .dates import DateFilter
from .engine import LogbookEngine, validate_write_options
from .errors import ConfigError, LogbookError

logger = logging.getLogger(__name__)

DATE_METAVAR = "YYYY|YYYY-MM|YYYY-MM-DD"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logbook",
        description="Take daily timestamped notes",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Path to config file (default: auto-detect in the user config directory)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show debug logging on stderr",
    )
    parser.add_argument(
        "--message",
        "-m",
        metavar="TEXT",
        help="The message to be recorded",
    )
    parser.add_argument(
        "--tag",
        "-t",
        dest="tags",
        metavar="TEXT",
        action="append",
        help="Tag associated with this message. Pass this option for each tag you have.",
    )
    parser.add_argument(
        "--utc_offset",
        "-u",
        type=float,
        metavar="NUMBER",
        help="The UTC offset to use for this message's timestamp, in 0.25 hour steps. "
             "Defaults to the current machine's offset.",
    )

    subparsers = parser.add_subparsers(dest="command")

    read_parser = subparsers.add_parser("read", help="Read back your log entries")
    read_parser.add_argument("--after", metavar=DATE_METAVAR, help="Read all entries after this date")
    read_parser.add_argument("--before", metavar=DATE_METAVAR, help="Read all entries before this date")
    read_parser.add_argument("--on", metavar=DATE_METAVAR, help="Read all entries on this date")
    read_parser.add_argument(
        "--list-days",
        action="store_true",
        help="Only list the days that have entries",
    )

    config_parser = subparsers.add_parser("config", help="Show or change where the logbook lives")
    config_parser.add_argument(
        "--set-dir",
        type=Path,
        metavar="PATH",
        help="Use PATH as the logbook directory (created if missing)",
    )

    return parser


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def prompt_for_logbook_dir() -> Path:
    """Ask where the logbook should live; empty answer or EOF means default."""
    try:
        answer = input("Where will your logbook be? ").strip()
    except EOFError:
        answer = ""

    if answer:
        return resolve_logbook_dir(answer)

    fallback = default_logbook_dir()
    print(f"No logbook dir chosen, using {fallback}")
    return fallback


def create_config(path: Path, logbook_dir: Path) -> LogbookConfig:
    """Create the logbook directory and save a config pointing at it."""
    check_save_path(path)
    try:
        logbook_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"Could not create logbook directory {logbook_dir}: {e}") from e

    config = LogbookConfig(logbook_dir=logbook_dir)
    save_config(config, path)
    logger.debug("Saved new config to %s", path)
    return config


def resolve_config(config_path: Optional[Path]) -> LogbookConfig:
    """Load the config, running first-run setup when there is none."""
    result = load_config(config_path)
    if isinstance(result, Loaded):
        return result.config

    # Fail before prompting when the config could not be saved anyway
    check_save_path(result.path)
    return create_config(result.path, prompt_for_logbook_dir())


def run_write(args: argparse.Namespace) -> None:
    # Reject bad options before the config is loaded or created
    message, tags, offset = validate_write_options(args.message, args.tags, args.utc_offset)
    config = resolve_config(args.config)
    engine = LogbookEngine(config.logbook_dir)
    entry = engine.write(message, tags=tags, offset_hours=offset)
    print("Successfully recorded message.")
    print(f"  {engine.day_path(entry.day)}")


def run_read(args: argparse.Namespace) -> None:
    # Filters are validated before the config is loaded or created
    date_filter = DateFilter.from_strings(before=args.before, after=args.after, on=args.on)
    config = resolve_config(args.config)
    engine = LogbookEngine(config.logbook_dir)

    if args.list_days:
        for day in engine.days(date_filter):
            print(day.isoformat())
        return

    current_day = None
    count = 0
    for entry in engine.read(date_filter):
        if entry.day != current_day:
            print(f"== {entry.day.isoformat()} ==")
            current_day = entry.day
        print(entry.text)
        count += 1

    if count == 0:
        print("No entries found.")


def run_config(args: argparse.Namespace) -> None:
    if args.set_dir is not None:
        # Does not read the old config, so a broken one can be replaced
        path = config_file_path(args.config)
        config = create_config(path, resolve_logbook_dir(args.set_dir))
        print(f"Logbook directory set to {config.logbook_dir}")
        print(f"Config saved to {path}")
        return

    result = load_config(args.config)

    if isinstance(result, NotFound):
        print(f"No config yet. One will be created at {result.path}")
        print(f"Default logbook directory: {default_logbook_dir()}")
        return

    print(f"Config file: {result.path}")
    print(f"Logbook directory: {result.config.logbook_dir}")


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.command is None and args.message is None:
        parser.error("the following arguments are required: -m/--message")
    if args.command is not None and (args.message is not None or args.tags or args.utc_offset is not None):
        parser.error(f"-m/--message, -t/--tag and -u/--utc_offset cannot be used with {args.command}")

    try:
        if args.command == "read":
            run_read(args)
        elif args.command == "config":
            run_config(args)
        else:
            run_write(args)
    except (LogbookError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
