from __future__ import annotations

from datetime import date
from types import SimpleNamespace

import pytest

from flights_db.catalog import add_carrier, add_flight
from flights_db.database import create_session_factory, init_db, session_scope
from flights_db.entities import Flight
from flights_db.identity import add_customer

TRAVEL_DAY = date(2024, 5, 10)


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+pysqlite:///{tmp_path / 'flights-test.db'}"


@pytest.fixture
def engine_and_factory(db_url):
    engine, session_factory = create_session_factory(db_url, timeout=15)
    init_db(engine)
    yield engine, session_factory
    engine.dispose()


@pytest.fixture
def engine(engine_and_factory):
    return engine_and_factory[0]


@pytest.fixture
def session_factory(engine_and_factory):
    return engine_and_factory[1]


def _flight(session, carrier, **kwargs) -> Flight:
    record = add_flight(session, carrier_id=carrier.cid, **kwargs)
    return Flight.from_record(record, carrier.name)


@pytest.fixture
def world(session_factory):
    """Customers and a small flight network around Boston -> Seattle on TRAVEL_DAY."""

    with session_scope(session_factory) as session:
        alaska = add_carrier(session, name="Alaska Airlines Inc.")
        delta = add_carrier(session, name="Delta Air Lines Inc.")
        users = {"alice": add_customer(session, handle="alice", password="correct-secret", name="Alice")}
        for handle in ("bob", "carol", "dave", "erin"):
            users[handle] = add_customer(session, handle=handle, password=f"{handle}-secret", name=handle.title())
        flights = {
            "bos_sea_300": _flight(
                session, alaska, flight_num="12", flight_date=TRAVEL_DAY,
                origin_city="Boston MA", dest_city="Seattle WA", actual_time=300,
            ),
            "bos_sea_280": _flight(
                session, delta, flight_num="34", flight_date=TRAVEL_DAY,
                origin_city="Boston MA", dest_city="Seattle WA", actual_time=280,
            ),
            "bos_sea_no_time": _flight(
                session, delta, flight_num="56", flight_date=TRAVEL_DAY,
                origin_city="Boston MA", dest_city="Seattle WA", actual_time=None,
            ),
            "bos_sea_next_day": _flight(
                session, alaska, flight_num="78", flight_date=date(2024, 5, 11),
                origin_city="Boston MA", dest_city="Seattle WA", actual_time=200,
            ),
            "bos_chi": _flight(
                session, delta, flight_num="90", flight_date=TRAVEL_DAY,
                origin_city="Boston MA", dest_city="Chicago IL", actual_time=100,
            ),
            "chi_sea": _flight(
                session, alaska, flight_num="91", flight_date=TRAVEL_DAY,
                origin_city="Chicago IL", dest_city="Seattle WA", actual_time=150,
            ),
            "bos_den": _flight(
                session, alaska, flight_num="92", flight_date=TRAVEL_DAY,
                origin_city="Boston MA", dest_city="Denver CO", actual_time=200,
            ),
            "den_sea": _flight(
                session, delta, flight_num="93", flight_date=TRAVEL_DAY,
                origin_city="Denver CO", dest_city="Seattle WA", actual_time=200,
            ),
            "sea_bos_june": _flight(
                session, delta, flight_num="94", flight_date=date(2024, 6, 10),
                origin_city="Seattle WA", dest_city="Boston MA", actual_time=310,
            ),
        }
    return SimpleNamespace(users=users, flights=flights, day=TRAVEL_DAY)
