"""Command line interface for searching, booking and cancelling flights."""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from typing import Iterable, List, Sequence

from tabulate import tabulate

from .config import Settings, load_properties
from .dataset import generate_sample_data
from .entities import Flight, Itinerary, ReservationResult
from .errors import StorageError
from .services import FlightsDB

_RESULT_MESSAGES = {
    ReservationResult.ADDED: "Booked.",
    ReservationResult.FLIGHT_FULL: "Sorry, that flight is full.",
    ReservationResult.DAY_FULL: "You already have a reservation on that day.",
}

_FLIGHT_HEADERS = ["Flight id", "Date", "Carrier", "Number", "From", "To", "Minutes"]


def _flight_row(flight: Flight) -> List[object]:
    return [
        flight.fid,
        flight.date.isoformat(),
        flight.carrier,
        flight.flight_num,
        flight.origin_city,
        flight.dest_city,
        flight.duration,
    ]


def _render_flights(flights: Iterable[Flight]) -> str:
    return tabulate([_flight_row(flight) for flight in flights], headers=_FLIGHT_HEADERS, tablefmt="github")


def _render_itineraries(itineraries: Sequence[Itinerary]) -> str:
    rows = []
    for index, itinerary in enumerate(itineraries, start=1):
        for leg, flight in enumerate(itinerary):
            prefix = [index, itinerary.total_time] if leg == 0 else ["", ""]
            rows.append(prefix + _flight_row(flight))
    return tabulate(rows, headers=["Option", "Total minutes"] + _FLIGHT_HEADERS, tablefmt="github")


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD") from exc


def parse_args(argv: Iterable[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search and reserve flights.")
    parser.add_argument("--database-url", help="SQLAlchemy URL (default: FLIGHTS_DB_URL or ./flights.db).")
    parser.add_argument("--properties", help="Legacy flightservice properties file with connection settings.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("init", help="Create the database tables.")

    seed = subparsers.add_parser("seed", help="Create tables and load sample data.")
    seed.add_argument("--flights", type=int, default=60, help="Number of flights (default: 60).")
    seed.add_argument("--customers", type=int, default=20, help="Number of customers (default: 20).")
    seed.add_argument("--bookings", type=int, default=40, help="Booking attempts (default: 40).")

    search = subparsers.add_parser("search", help="Search itineraries between two cities.")
    search.add_argument("date", type=_iso_date, help="Travel date (YYYY-MM-DD).")
    search.add_argument("origin", help="Origin city.")
    search.add_argument("destination", help="Destination city.")
    search.add_argument("--direct-only", action="store_true", help="Skip one-stop itineraries.")

    def account(name: str, help_text: str) -> argparse.ArgumentParser:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--handle", required=True, help="Login handle.")
        sub.add_argument("--password", required=True, help="Login password.")
        return sub

    account("reservations", "List your reservations.")
    book = account("book", "Reserve a direct or one-stop itinerary.")
    book.add_argument("date", type=_iso_date, help="Travel date (YYYY-MM-DD).")
    book.add_argument("flight_ids", type=int, nargs="+", help="One or two flight ids.")
    cancel = account("cancel", "Cancel reservations.")
    cancel.add_argument("flight_ids", type=int, nargs="+", help="Flight ids to cancel.")

    return parser.parse_args(list(argv))


def _settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    if args.properties:
        settings = Settings.from_properties(load_properties(args.properties), base=settings)
    if args.database_url:
        settings = settings.with_url(args.database_url)
    return settings


def run(args: argparse.Namespace, db: FlightsDB) -> int:
    if args.command == "init":
        db.create_schema()
        print("Tables created.")
        return 0
    if args.command == "seed":
        db.create_schema()
        summary = generate_sample_data(
            db.session_factory,
            flights=args.flights,
            customers=args.customers,
            bookings=args.bookings,
            max_flight_bookings=db.ledger.max_flight_bookings,
        )
        print(tabulate(sorted(summary.items()), headers=["Item", "Count"], tablefmt="github"))
        return 0
    if args.command == "search":
        itineraries = db.search(
            args.date, args.origin, args.destination, include_connections=not args.direct_only
        )
        if not itineraries:
            print("No flights found.")
        else:
            print(_render_itineraries(itineraries))
        return 0

    user = db.log_in(args.handle, args.password)
    if user is None:
        print("Login failed.", file=sys.stderr)
        return 2

    if args.command == "reservations":
        flights = db.get_reservations(user)
        print(_render_flights(flights) if flights else "No reservations.")
    elif args.command == "book":
        result = db.add_reservations(user, args.date, db.get_flights(args.flight_ids))
        print(_RESULT_MESSAGES[result])
        return 0 if result is ReservationResult.ADDED else 1
    elif args.command == "cancel":
        db.remove_reservations(user, db.get_flights(args.flight_ids))
        print("Cancelled reservations on flight(s) " + ", ".join(map(str, args.flight_ids)) + ".")
    return 0


def main(argv: Iterable[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        with FlightsDB(_settings(args)) as db:
            return run(args, db)
    except (StorageError, ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
