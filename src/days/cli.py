"""days command-line entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

from .config import load_config
from .engine import DaysEngine
from .errors import DaysError, UsageError
from .render import entry_lines

USAGE = "usage: days <track|since|reset|list|life <start|end [-v]>|journal <write|read>> [habit]"
PROMPT = "write your entry below. Hit [Enter] when done:"


class DaysArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting with status 2."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


def make_logger(stream: TextIO, quiet: bool = False) -> logging.Logger:
    """Build a standalone status logger writing bare messages to stream.

    The logger is not registered with the logging module, so nothing
    outside the dispatcher sees or reconfigures it.
    """
    logger = logging.Logger("days.cli")
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.WARNING if quiet else logging.INFO)
    return logger


def build_parser() -> DaysArgumentParser:
    parser = DaysArgumentParser(
        prog="days",
        description="Track days since habits, life progress and a daily journal",
    )
    parser.add_argument(
        "--data-dir",
        "-d",
        type=Path,
        help="Directory holding track.json and journal.json (default: $DAYS_HOME or ~/.days)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Path to config file (default: auto-detect in data directory)",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress status messages",
    )

    commands = parser.add_subparsers(dest="command", metavar="command")
    commands.required = True

    track = commands.add_parser("track", help="Start tracking a habit")
    track.add_argument("habit")

    since = commands.add_parser("since", help="Days since a habit was tracked or reset")
    since.add_argument("habit", help="Habit name or 1-based number")

    reset = commands.add_parser("reset", help="Restart a habit's count")
    reset.add_argument("habit", help="Habit name or 1-based number")

    commands.add_parser("list", help="Days since every habit")

    life = commands.add_parser("life", help="Life start date and progress")
    life_commands = life.add_subparsers(dest="life_command", metavar="start|end")
    life_commands.required = True
    life_start = life_commands.add_parser("start", help="Set life start date")
    life_start.add_argument("date", help="YYYY-MM-DD")
    life_end = life_commands.add_parser("end", help="Show progress towards the estimated end")
    life_end.add_argument("-v", "--verbose", action="store_true", help="Print a grid of every day")

    journal = commands.add_parser("journal", help="Write or read journal entries")
    journal_commands = journal.add_subparsers(dest="journal_command", metavar="write|read")
    journal_commands.required = True
    journal_commands.add_parser("write", help="Write one line read from stdin")
    journal_read = journal_commands.add_parser("read", help="Read entries between two days")
    journal_read.add_argument("start", nargs="?", help="YYYY-MM-DD (default: today)")
    journal_read.add_argument("end", nargs="?", help="YYYY-MM-DD (default: start)")

    return parser


def _print_lines(lines: list[str], out: TextIO) -> None:
    for line in lines:
        print(line, file=out)


def dispatch(
    args: argparse.Namespace,
    engine: DaysEngine,
    log: logging.Logger,
    stdin: TextIO,
    stdout: TextIO,
    stderr: TextIO,
) -> None:
    """Run one parsed command against the engine."""
    command = args.command

    if command == "track":
        log.info("tracking '%s'...", args.habit)
        engine.track(args.habit)

    elif command == "since":
        log.info("reading days since %s...", args.habit)
        print(engine.since(args.habit), file=stdout)

    elif command == "list":
        log.info("listing days since all habits...")
        _print_lines(engine.list_habits(), stdout)

    elif command == "reset":
        log.info("resetting count for %s...", args.habit)
        engine.reset(args.habit)

    elif command == "life":
        if args.life_command == "start":
            log.info("setting life start date...")
            engine.life_start(args.date)
        else:
            log.info("calculating approximately how long you may have till the end...")
            _print_lines(engine.life_end(verbose=args.verbose), stdout)

    elif command == "journal":
        if args.journal_command == "write":
            print(PROMPT, file=stderr)
            line = stdin.readline()
            if not line:
                raise UsageError("expected a line of journal text on stdin")
            engine.journal_write(line.rstrip("\r\n"))
        else:
            _print_lines(entry_lines(engine.journal_read(args.start, args.end)), stdout)

    else:  # pragma: no cover
        raise UsageError(f"unknown command '{command}'")


def run(
    argv: Optional[list[str]] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
    engine: Optional[DaysEngine] = None,
) -> int:
    """Parse argv, run the command and return the exit status."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    try:
        args = build_parser().parse_args(argv)
    except UsageError as e:
        print(f"{USAGE}: {e}", file=stderr)
        return 1

    log = make_logger(stderr, quiet=args.quiet)

    if engine is None:
        try:
            engine = DaysEngine(load_config(args.data_dir, args.config))
        except (OSError, ValueError) as e:
            print(f"Error loading config: {e}", file=stderr)
            return 1

    try:
        dispatch(args, engine, log, stdin, stdout, stderr)
    except UsageError as e:
        print(f"{USAGE}: {e}", file=stderr)
        return 1
    except DaysError as e:
        print(f"error: {e}", file=stderr)
        return 1

    return 0


def main() -> None:
    """Main entry point."""
    sys.exit(run())


if __name__ == "__main__":  # pragma: no cover
    main()
