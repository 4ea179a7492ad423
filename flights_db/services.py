"""Entry point used by presentation code: login, search, book and cancel."""
from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from . import catalog, identity
from .config import Settings
from .database import engine_from_settings, init_db, session_scope
from .entities import Flight, Itinerary, ReservationResult, User
from .ledger import ReservationLedger

logger = logging.getLogger(__name__)


class FlightsDB:
    """Connection-owning facade over the catalog, identity check and ledger.

    Usage::

        with FlightsDB(Settings.from_env()) as db:
            user = db.log_in("alice", "secret")
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings: Optional[Settings] = None
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker[Session]] = None
        self._ledger: Optional[ReservationLedger] = None
        if settings is not None:
            self.open(settings)

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._session_factory is None:
            raise RuntimeError("database is not open")
        return self._session_factory

    @property
    def ledger(self) -> ReservationLedger:
        if self._ledger is None:
            raise RuntimeError("database is not open")
        return self._ledger

    def open(self, settings: Settings) -> None:
        if self.is_open:
            raise RuntimeError("database is already open")
        self._engine, self._session_factory = engine_from_settings(settings)
        self._ledger = ReservationLedger(
            self._session_factory,
            max_flight_bookings=settings.max_flight_bookings,
            legacy_day_of_month=settings.legacy_day_of_month,
        )
        self.settings = settings
        logger.info("opened flights database (capacity %d per flight)", settings.max_flight_bookings)

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        self._ledger = None
        logger.info("closed flights database")

    def __enter__(self) -> "FlightsDB":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def create_schema(self) -> None:
        if self._engine is None:
            raise RuntimeError("database is not open")
        init_db(self._engine)

    def log_in(self, handle: str, password: str) -> Optional[User]:
        with session_scope(self.session_factory) as session:
            return identity.log_in(session, handle, password)

    def search(
        self,
        day: date,
        origin_city: str,
        dest_city: str,
        *,
        include_connections: bool = True,
    ) -> List[Itinerary]:
        with session_scope(self.session_factory) as session:
            return catalog.search(
                session, day, origin_city, dest_city, include_connections=include_connections
            )

    def get_flights(self, fids: Sequence[int]) -> List[Flight]:
        with session_scope(self.session_factory) as session:
            return catalog.get_flights(session, fids)

    def get_reservations(self, user: User) -> List[Flight]:
        with session_scope(self.session_factory) as session:
            return catalog.get_reservations(session, user)

    def add_reservations(self, user: User, day: date, flights: Sequence[Flight]) -> ReservationResult:
        return self.ledger.add_reservations(user, day, flights)

    def remove_reservations(self, user: User, flights: Sequence[Flight]) -> None:
        self.ledger.remove_reservations(user, flights)
