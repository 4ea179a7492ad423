"""Read-only flight queries: direct and one-stop search, reservation listing."""
from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy import Select, select
from sqlalchemy.orm import Session, aliased

from .entities import Flight, Itinerary, User
from .models import Carrier, FlightRecord, Reservation

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 99


def add_carrier(session: Session, *, name: str) -> Carrier:
    carrier = Carrier(name=name)
    session.add(carrier)
    session.flush()
    return carrier


def add_flight(
    session: Session,
    *,
    carrier_id: int,
    flight_num: str,
    flight_date: date,
    origin_city: str,
    dest_city: str,
    actual_time: Optional[int],
) -> FlightRecord:
    """Create a flight entry."""

    flight = FlightRecord(
        carrier_id=carrier_id,
        flight_num=flight_num,
        year=flight_date.year,
        month_id=flight_date.month,
        day_of_month=flight_date.day,
        origin_city=origin_city,
        dest_city=dest_city,
        actual_time=actual_time,
    )
    session.add(flight)
    session.flush()
    return flight


def _on_day(flight, day: date):
    return (
        (flight.year == day.year)
        & (flight.month_id == day.month)
        & (flight.day_of_month == day.day)
    )


def direct_itineraries(session: Session, day: date, origin_city: str, dest_city: str) -> List[Itinerary]:
    stmt: Select = (
        select(FlightRecord, Carrier.name)
        .select_from(FlightRecord)
        .join(Carrier, FlightRecord.carrier_id == Carrier.cid)
        .where(
            FlightRecord.actual_time.is_not(None),
            _on_day(FlightRecord, day),
            FlightRecord.origin_city == origin_city,
            FlightRecord.dest_city == dest_city,
        )
        .order_by(FlightRecord.actual_time, FlightRecord.fid)
        .limit(SEARCH_LIMIT)
    )
    return [
        Itinerary((Flight.from_record(record, carrier),))
        for record, carrier in session.execute(stmt)
    ]


def connecting_itineraries(session: Session, day: date, origin_city: str, dest_city: str) -> List[Itinerary]:
    first, second = aliased(FlightRecord), aliased(FlightRecord)
    first_carrier, second_carrier = aliased(Carrier), aliased(Carrier)
    stmt: Select = (
        select(first, first_carrier.name, second, second_carrier.name)
        .select_from(first)
        .join(first_carrier, first.carrier_id == first_carrier.cid)
        .join(second, first.dest_city == second.origin_city)
        .join(second_carrier, second.carrier_id == second_carrier.cid)
        .where(
            first.actual_time.is_not(None),
            second.actual_time.is_not(None),
            _on_day(first, day),
            _on_day(second, day),
            first.origin_city == origin_city,
            second.dest_city == dest_city,
        )
        .order_by(first.actual_time + second.actual_time, first.fid, second.fid)
        .limit(SEARCH_LIMIT)
    )
    return [
        Itinerary((Flight.from_record(leg1, name1), Flight.from_record(leg2, name2)))
        for leg1, name1, leg2, name2 in session.execute(stmt)
    ]


def search(
    session: Session,
    day: date,
    origin_city: str,
    dest_city: str,
    *,
    include_connections: bool = True,
) -> List[Itinerary]:
    """Return direct and one-stop itineraries in one list, shortest total time first.

    Each category is capped at ``SEARCH_LIMIT`` rows. On equal total time a direct
    itinerary sorts before a connecting one.
    """

    results = direct_itineraries(session, day, origin_city, dest_city)
    if include_connections:
        results.extend(connecting_itineraries(session, day, origin_city, dest_city))
        results.sort(key=lambda itinerary: (itinerary.total_time, len(itinerary)))
    logger.debug(
        "search %s %s->%s returned %d itineraries", day.isoformat(), origin_city, dest_city, len(results)
    )
    return results


def get_reservations(session: Session, user: User) -> List[Flight]:
    stmt: Select = (
        select(FlightRecord, Carrier.name)
        .select_from(FlightRecord)
        .join(Reservation, Reservation.fid == FlightRecord.fid)
        .join(Carrier, FlightRecord.carrier_id == Carrier.cid)
        .where(Reservation.uid == user.uid)
        .order_by(FlightRecord.year, FlightRecord.month_id, FlightRecord.day_of_month, FlightRecord.fid)
    )
    return [Flight.from_record(record, carrier) for record, carrier in session.execute(stmt)]


def get_flights(session: Session, fids: Sequence[int]) -> List[Flight]:
    """Load flights by id, in the order given."""

    stmt: Select = (
        select(FlightRecord, Carrier.name)
        .select_from(FlightRecord)
        .join(Carrier, FlightRecord.carrier_id == Carrier.cid)
        .where(FlightRecord.fid.in_(fids))
    )
    found = {record.fid: Flight.from_record(record, carrier) for record, carrier in session.execute(stmt)}
    missing = [fid for fid in fids if fid not in found]
    if missing:
        raise ValueError(f"unknown flight(s) {missing}")
    return [found[fid] for fid in fids]
