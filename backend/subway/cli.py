#!/usr/bin/env python3
"""CLI tool for inspecting and seeding the subway database.

Usage:
    # Create tables in the configured database
    python -m subway.cli init-db

    # Register a station
    python -m subway.cli create-station 강남역

    # List stations / lines
    python -m subway.cli list-stations
    python -m subway.cli list-lines

    # Show one line with its sections in route order
    python -m subway.cli show-line 1
"""

import argparse
import asyncio
import sys
from collections.abc import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from subway.core.database import get_engine, get_session_factory
from subway.core.errors import SubwayError
from subway.models import Base
from subway.services.line_service import LineService
from subway.services.station_service import StationService

CommandHandler = Callable[[argparse.Namespace, AsyncSession], Awaitable[int]]


async def cmd_create_station(args: argparse.Namespace, session: AsyncSession) -> int:
    """
    Register a station.

    Returns:
        Exit code (0 for success)
    """
    station = await StationService(session).create_station(args.name)
    print(f"Created station {station.id}: {station.name}")
    return 0


async def cmd_list_stations(args: argparse.Namespace, session: AsyncSession) -> int:
    """List all stations."""
    stations = await StationService(session).list_stations()

    if not stations:
        print("No stations found")
        return 0

    print(f"{'ID':<8} Name")
    print("-" * 30)
    for station in stations:
        print(f"{station.id:<8} {station.name}")
    return 0


async def cmd_list_lines(args: argparse.Namespace, session: AsyncSession) -> int:
    """List all lines with section count and distance."""
    lines = await LineService(session).list_lines()

    if not lines:
        print("No lines found")
        return 0

    print(f"{'ID':<8} {'Name':<20} {'Color':<16} {'Sections':<10} Distance")
    print("-" * 70)
    for line in lines:
        print(f"{line.id:<8} {line.name:<20} {line.color:<16} {line.ledger.size():<10} {line.distance}")
    return 0


async def cmd_show_line(args: argparse.Namespace, session: AsyncSession) -> int:
    """
    Show a line's stations and sections.

    Returns:
        Exit code (0 for success, 1 if the line does not exist)
    """
    try:
        line = await LineService(session).get_line(args.line_id)
    except SubwayError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1

    print(f"{line.name} ({line.color}) - distance {line.distance}")
    print("Stations: " + " -> ".join(station.name for station in line.stations))
    print()
    for section in line.ledger:
        print(f"  [{section.id}] {section.up_station.name} -> {section.down_station.name} ({section.distance})")
    return 0


async def init_db() -> int:
    """Create all tables that do not exist yet."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("✅ Database tables created")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="python -m subway.cli",
        description="Subway database tools",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser("init-db", help="Create database tables")

    create_station_parser = subparsers.add_parser("create-station", help="Register a station")
    create_station_parser.add_argument("name", type=str, help="Station name")

    subparsers.add_parser("list-stations", help="List all stations")
    subparsers.add_parser("list-lines", help="List all lines")

    show_line_parser = subparsers.add_parser("show-line", help="Show a line with its sections")
    show_line_parser.add_argument("line_id", type=int, help="Line ID")

    return parser


COMMAND_HANDLERS: dict[str, CommandHandler] = {
    "create-station": cmd_create_station,
    "list-stations": cmd_list_stations,
    "list-lines": cmd_list_lines,
    "show-line": cmd_show_line,
}


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "init-db":
        return asyncio.run(init_db())

    if handler := COMMAND_HANDLERS.get(args.command):

        async def run_with_session() -> int:
            async with get_session_factory()() as session:
                try:
                    return await handler(args, session)
                except Exception as e:
                    print(f"❌ Unexpected error: {e}", file=sys.stderr)
                    return 1

        return asyncio.run(run_with_session())

    print(f"❌ Unknown command: {args.command}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
