"""Utilities to populate the database with sample data for tests and demos."""
from __future__ import annotations

import random
from collections import Counter
from datetime import date, timedelta
from typing import Dict, List, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from .catalog import add_carrier, add_flight
from .database import session_scope
from .entities import Flight, User
from .identity import hash_password
from .ledger import ReservationLedger
from .models import Carrier, Customer, FlightRecord

CITIES: Sequence[str] = (
    "Boston MA",
    "Seattle WA",
    "Chicago IL",
    "Denver CO",
    "Atlanta GA",
    "New York NY",
    "San Francisco CA",
)
CARRIERS = ("Alaska Airlines Inc.", "Delta Air Lines Inc.", "JetBlue Airways", "United Air Lines Inc.")
FIRST_NAMES = ("Ava", "Noah", "Liam", "Mia", "Lucas", "Emma", "Ethan", "Isabella")
LAST_NAMES = ("Johnson", "Williams", "Smith", "Brown", "Garcia", "Lee")
DEMO_PASSWORD = "password"


def generate_sample_data(
    session_factory: sessionmaker[Session],
    *,
    carriers: int = 4,
    flights: int = 60,
    customers: int = 20,
    bookings: int = 40,
    start: date | None = None,
    days: int = 5,
    max_flight_bookings: int = 3,
    seed: int = 42,
) -> Dict[str, int]:
    """Populate the database with deterministic pseudo-random data.

    Every customer is created with handle ``user<N>`` and ``DEMO_PASSWORD``.
    Bookings go through :class:`ReservationLedger`, so rejected attempts are
    counted by outcome rather than written.
    """

    rng = random.Random(seed)
    first_day = start or date.today()
    # one hash shared by every demo account keeps seeding fast
    password_hash = hash_password(DEMO_PASSWORD)

    with session_scope(session_factory) as session:
        carrier_ids = [add_carrier(session, name=name).cid for name in CARRIERS[:carriers]]
        for index in range(flights):
            origin, destination = rng.sample(CITIES, 2)
            add_flight(
                session,
                carrier_id=rng.choice(carrier_ids),
                flight_num=str(100 + index),
                flight_date=first_day + timedelta(days=rng.randrange(days)),
                origin_city=origin,
                dest_city=destination,
                # every tenth flight has no recorded time, like a cancelled one
                actual_time=None if index % 10 == 9 else rng.randint(60, 360),
            )
        for index in range(customers):
            session.add(
                Customer(
                    handle=f"user{index}",
                    password=password_hash,
                    name=f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
                )
            )

    with session_scope(session_factory) as session:
        carrier_names = dict(session.execute(select(Carrier.cid, Carrier.name)).all())
        flight_list: List[Flight] = [
            Flight.from_record(record, carrier_names[record.carrier_id])
            for record in session.scalars(select(FlightRecord))
        ]
        users = [User.from_record(customer) for customer in session.scalars(select(Customer))]

    outcomes: Counter = Counter()
    if flight_list and users:
        ledger = ReservationLedger(session_factory, max_flight_bookings=max_flight_bookings)
        for _ in range(bookings):
            flight = rng.choice(flight_list)
            result = ledger.add_reservations(rng.choice(users), flight.date, [flight])
            outcomes[result.value] += 1

    return {
        "carriers": len(carrier_ids),
        "flights": len(flight_list),
        "customers": len(users),
        "bookings": outcomes["added"],
        "flight_full": outcomes["flight_full"],
        "day_full": outcomes["day_full"],
    }
