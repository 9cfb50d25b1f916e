"""CLI entry point for Holiday Calendars application."""

import argparse
import sys
from pathlib import Path

from .config import config
from .services.bootstrap import Bootstrapper
from .services.calendar_service import CalendarService
from .store.memory import JsonFileStore
from .utils.exceptions import CalendarSyncError
from .utils.logging import setup_logging


def _print_calendar(calendar) -> None:
    marker = " [default]" if calendar.default else ""
    print(f"  - {calendar.name} (ID: {calendar.id}){marker}")
    print(f"    Timezone: {calendar.timezone}")
    if calendar.ical_url:
        print(f"    Feed: {calendar.ical_url}")
        print(f"    Last sync: {calendar.last_sync or 'never'}")
    if calendar.last_log:
        print(f"    Last error: {calendar.last_log}")
    active = sum(1 for entry in calendar.public_holidays.values() if entry.active)
    print(f"    Holidays: {active} active / {len(calendar.public_holidays)} total")


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Holiday Calendars - Sync public holiday feeds into SLA calendars"
    )
    parser.add_argument(
        "--store",
        type=Path,
        default=None,
        help="Calendar store JSON file (default: CALENDAR_STORE_PATH)",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List calendars",
    )
    parser.add_argument(
        "--sync",
        type=int,
        metavar="ID",
        help="Sync the holiday feed of one calendar",
    )
    parser.add_argument(
        "--sync-all",
        action="store_true",
        help="Sync the holiday feeds of all calendars",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads for --sync-all (overrides config)",
    )
    parser.add_argument(
        "--list-feeds",
        action="store_true",
        help="List preset public holiday feeds",
    )
    parser.add_argument(
        "--timezones",
        action="store_true",
        help="List timezones with their UTC offset",
    )
    parser.add_argument(
        "--init-setup",
        nargs="?",
        const="",
        metavar="IP",
        help="Create the initial default calendar from a geo suggestion",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )

    args = parser.parse_args(argv)

    log_level = "DEBUG" if args.verbose else config.log_level
    logger = setup_logging(level=log_level, log_file=config.log_file)

    try:
        store = JsonFileStore(args.store or config.calendar_store_path)
        service = CalendarService(store)

        if args.list_feeds:
            feeds = service.ical_feeds()
            for url, country in sorted(feeds.items(), key=lambda item: item[1]):
                print(f"{country}: {url}")
            return 0

        if args.timezones:
            for name, offset in service.timezones().items():
                print(f"{name} {offset:+d}")
            return 0

        if args.init_setup is not None:
            calendar = Bootstrapper(service).init_setup(args.init_setup or None)
            if calendar is None:
                print("Initial setup skipped")
            else:
                print("Initial calendar:")
                _print_calendar(calendar)
            return 0

        if args.sync is not None:
            result = service.sync(args.sync)
            print(f"Calendar {args.sync}: {result.status}")
            if result.error:
                print(f"  Error: {result.error}")
                return 1
            return 0

        if args.sync_all:
            results = service.sync_all(max_workers=args.workers)
            failed = [r for r in results if not r.ok]
            print(f"\nSync Results:")
            print(f"  Calendars: {len(results)}")
            print(f"  Failed: {len(failed)}")
            for r in failed:
                print(f"  - calendar {r.calendar_id}: {r.error}")
            return 1 if failed else 0

        if args.list:
            calendars = store.all()
            print(f"Found {len(calendars)} calendar(s):")
            for calendar in calendars:
                _print_calendar(calendar)
            return 0

        parser.print_help()
        return 0

    except CalendarSyncError as e:
        logger.error(f"Calendar error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
