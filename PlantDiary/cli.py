# PlantDiary/cli.py

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

from PlantDiary.config import Settings
from PlantDiary.core.timeutil import month_bounds
from PlantDiary.daemon import build_generator, build_store, run_daemon
from PlantDiary.database import init_database
from PlantDiary.errors import InitializationError
from PlantDiary.ingestion.scheduler import IngestionScheduler

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(funcName)-20s | %(message)s"

log = logging.getLogger("PlantDiary.cli")


def _parse_month(value: str):
    try:
        parsed = datetime.strptime(value, "%Y-%m")
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM, got {value!r}")
    return parsed.year, parsed.month


def _print_entries(entries, tz) -> None:
    if not entries:
        print("No diary entries.")
        return
    for entry in entries:
        day = entry.created_at.astimezone(tz).strftime("%Y-%m-%d %H:%M")
        first_line = entry.content.strip().splitlines()[0] if entry.content.strip() else ""
        print(f"{entry.id}  {day}  {Path(entry.image_path).name}  {first_line[:60]}")


def handle_init_db(args_ns, settings: Settings):
    path = init_database(settings.db_path)
    log.info(f"DuckDB database initialized at {path}.")


def handle_run(args_ns, settings: Settings):
    run_daemon(settings)


def handle_scan(args_ns, settings: Settings):
    if args_ns.mock:
        settings.use_mock_generator = True
    store = build_store(settings)
    generator = build_generator(settings)
    report = IngestionScheduler.from_settings(settings, store, generator).run_pass()
    print(f"Scan finished: {report.summary()}")
    if report.aborted:
        sys.exit(1)


def handle_list(args_ns, settings: Settings):
    store = build_store(settings)
    tz = settings.presentation_tz()
    if args_ns.month:
        start, end = month_bounds(*args_ns.month, tz=tz)
        entries = list(reversed(store.entries_in_range(start, end)))
        if args_ns.search:
            needle = args_ns.search.lower()
            entries = [e for e in entries if needle in e.content.lower()]
    elif args_ns.search:
        entries = store.search(args_ns.search)
    else:
        entries = store.all_entries()
    _print_entries(entries, tz)


def handle_show(args_ns, settings: Settings):
    store = build_store(settings)
    entry = store.get(args_ns.entry_id)
    if entry is None:
        print(f"No diary entry with id {args_ns.entry_id}")
        sys.exit(1)
    tz = settings.presentation_tz()
    print(f"{entry.created_at.astimezone(tz).strftime('%Y-%m-%d %H:%M')}  {entry.image_path}")
    print()
    print(entry.content)


def handle_months(args_ns, settings: Settings):
    store = build_store(settings)
    months = store.available_year_months(settings.presentation_tz())
    if not months:
        print("No diary entries.")
    for ym in months:
        print(ym.label())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plantdiary",
        description="PlantDiary: automatic observation diary for a plant photo stream"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging for all PlantDiary modules."
    )
    subparsers = parser.add_subparsers(dest="command", title="Available Commands", required=True)

    parser_dbinit = subparsers.add_parser("init-db", help="Initialize the DuckDB database and create all tables.")
    parser_dbinit.set_defaults(func=handle_init_db)

    parser_run = subparsers.add_parser("run", help="Run the ingestion daemon until interrupted.")
    parser_run.set_defaults(func=handle_run)

    parser_scan = subparsers.add_parser("scan", help="Run a single ingestion pass and exit.")
    parser_scan.add_argument("--mock", action="store_true", help="Use the offline mock generator.")
    parser_scan.set_defaults(func=handle_scan)

    parser_list = subparsers.add_parser("list", help="List diary entries, newest first.")
    parser_list.add_argument("--month", type=_parse_month, help="Only entries from this month (YYYY-MM, JST).")
    parser_list.add_argument("--search", help="Case-insensitive keyword filter on the diary text.")
    parser_list.set_defaults(func=handle_list)

    parser_show = subparsers.add_parser("show", help="Print one diary entry.")
    parser_show.add_argument("entry_id", help="Entry id as printed by `list`.")
    parser_show.set_defaults(func=handle_show)

    parser_months = subparsers.add_parser("months", help="List months that have diary entries.")
    parser_months.set_defaults(func=handle_months)

    return parser


def main(argv=None):
    settings = Settings()
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(format=LOG_FORMAT, level=getattr(logging, settings.log_level.upper(), logging.INFO))
    logging.getLogger("apscheduler.scheduler").setLevel(logging.WARNING)
    logging.getLogger("apscheduler.executors.default").setLevel(logging.WARNING)

    if args.debug:
        logging.getLogger("PlantDiary").setLevel(logging.DEBUG)
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)
        for handler in root_logger.handlers:
            handler.setLevel(logging.DEBUG)
        log.debug("Debug logging enabled via CLI.")

    try:
        args.func(args, settings)
    except InitializationError as e:
        log.error(f"Startup failed: {e}")
        sys.exit(2)


if __name__ == "__main__":
    main()
