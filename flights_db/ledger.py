"""Reservation booking and cancellation."""
from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from .config import DEFAULT_MAX_FLIGHT_BOOKINGS
from .database import session_scope
from .entities import Flight, ReservationResult, User
from .models import Customer, FlightRecord, Reservation

logger = logging.getLogger(__name__)


def _itinerary_ids(flights: Iterable[Flight]) -> List[int]:
    fids = [flight.fid for flight in flights]
    if len(fids) not in (1, 2):
        raise ValueError("an itinerary holds one or two flights")
    if len(set(fids)) != len(fids):
        raise ValueError("an itinerary cannot list the same flight twice")
    return fids


class ReservationLedger:
    """Owns reservation rows and enforces flight capacity and one booking per day.

    Each booking runs as one transaction that locks the customer row and the
    itinerary's flight rows before checking anything, so two overlapping
    bookings against the same flight or user are serialized. SQLite has no row
    locks; there the transaction begins IMMEDIATE and holds the database write
    lock instead.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        max_flight_bookings: int = DEFAULT_MAX_FLIGHT_BOOKINGS,
        legacy_day_of_month: bool = False,
    ) -> None:
        if max_flight_bookings < 1:
            raise ValueError("max_flight_bookings must be at least 1")
        self.session_factory = session_factory
        self.max_flight_bookings = max_flight_bookings
        # compare only the day of month, as older deployments did
        self.legacy_day_of_month = legacy_day_of_month

    def add_reservations(self, user: User, day: date, flights: Sequence[Flight]) -> ReservationResult:
        """Book every flight of the itinerary for ``user``, or none of them."""

        legs = _itinerary_ids(flights)
        fids = sorted(legs)
        with session_scope(self.session_factory, immediate=True) as session:
            self._lock(session, user, day, legs)

            full = self._full_flights(session, fids)
            if full:
                logger.info("user %s: flight(s) %s full", user.uid, full)
                return ReservationResult.FLIGHT_FULL

            if self._has_reservation_on(session, user, day):
                logger.info("user %s already holds a reservation on %s", user.uid, day.isoformat())
                return ReservationResult.DAY_FULL

            session.add_all([Reservation(uid=user.uid, fid=fid) for fid in fids])
            try:
                session.flush()
            except IntegrityError:
                session.rollback()
                logger.warning("user %s: duplicate reservation on %s", user.uid, fids)
                return ReservationResult.DAY_FULL

        logger.info("user %s reserved flight(s) %s on %s", user.uid, fids, day.isoformat())
        return ReservationResult.ADDED

    def remove_reservations(self, user: User, flights: Iterable[Flight]) -> None:
        """Cancel the user's reservations on ``flights``; missing ones are ignored."""

        fids = sorted({flight.fid for flight in flights})
        if not fids:
            return
        with session_scope(self.session_factory, immediate=True) as session:
            result = session.execute(
                delete(Reservation).where(Reservation.uid == user.uid, Reservation.fid.in_(fids))
            )
            logger.info("user %s cancelled %d reservation(s) on %s", user.uid, result.rowcount, fids)

    def reservation_count(self, fid: int) -> int:
        with session_scope(self.session_factory) as session:
            return session.scalar(
                select(func.count()).select_from(Reservation).where(Reservation.fid == fid)
            ) or 0

    def _lock(self, session: Session, user: User, day: date, legs: List[int]) -> None:
        fids = sorted(legs)
        customer = session.scalar(select(Customer.uid).where(Customer.uid == user.uid).with_for_update())
        if customer is None:
            raise ValueError(f"unknown user {user.uid}")
        records = session.scalars(
            select(FlightRecord)
            .where(FlightRecord.fid.in_(fids))
            .order_by(FlightRecord.fid)
            .with_for_update()
        ).all()
        found = {record.fid for record in records}
        missing = [fid for fid in fids if fid not in found]
        if missing:
            raise ValueError(f"unknown flight(s) {missing}")
        for record in records:
            scheduled = date(record.year, record.month_id, record.day_of_month)
            if scheduled != day:
                raise ValueError(f"flight {record.fid} is scheduled on {scheduled}, not {day}")
        if len(legs) == 2:
            by_fid = {record.fid: record for record in records}
            first, second = by_fid[legs[0]], by_fid[legs[1]]
            if first.dest_city != second.origin_city:
                raise ValueError(
                    f"flight {first.fid} lands in {first.dest_city}, "
                    f"but flight {second.fid} leaves from {second.origin_city}"
                )

    def _full_flights(self, session: Session, fids: List[int]) -> List[int]:
        stmt = (
            select(Reservation.fid)
            .where(Reservation.fid.in_(fids))
            .group_by(Reservation.fid)
            .having(func.count() >= self.max_flight_bookings)
        )
        return sorted(session.scalars(stmt))

    def _has_reservation_on(self, session: Session, user: User, day: date) -> bool:
        stmt = (
            select(Reservation.fid)
            .join(FlightRecord, FlightRecord.fid == Reservation.fid)
            .where(Reservation.uid == user.uid, FlightRecord.day_of_month == day.day)
        )
        if not self.legacy_day_of_month:
            stmt = stmt.where(FlightRecord.year == day.year, FlightRecord.month_id == day.month)
        return session.scalars(stmt.limit(1)).first() is not None
