from datetime import date

from sqlalchemy import func, select

from flights_db.database import session_scope
from flights_db.dataset import DEMO_PASSWORD, generate_sample_data
from flights_db.identity import log_in
from flights_db.models import Carrier, Customer, FlightRecord, Reservation


def test_dataset_generator_creates_records(session_factory):
    summary = generate_sample_data(
        session_factory,
        flights=30,
        customers=10,
        bookings=40,
        start=date(2024, 5, 1),
        days=3,
        max_flight_bookings=2,
    )

    with session_scope(session_factory) as session:
        assert session.scalar(select(func.count()).select_from(FlightRecord)) == 30
        assert session.scalar(select(func.count()).select_from(Customer)) == 10
        assert session.scalar(select(func.count()).select_from(Carrier)) == 4
        reservations = session.scalar(select(func.count()).select_from(Reservation))
        per_flight = session.execute(
            select(Reservation.fid, func.count()).group_by(Reservation.fid)
        ).all()
        assert log_in(session, "user0", DEMO_PASSWORD) is not None

    assert summary["bookings"] == reservations
    assert summary["bookings"] + summary["flight_full"] + summary["day_full"] == 40
    assert all(count <= 2 for _, count in per_flight)


def test_dataset_generator_is_deterministic(tmp_path):
    from flights_db.database import create_session_factory
    from flights_db.models import Base

    summaries = []
    for name in ("a.db", "b.db"):
        engine, factory = create_session_factory(f"sqlite+pysqlite:///{tmp_path / name}")
        Base.metadata.create_all(engine)
        summaries.append(generate_sample_data(factory, flights=10, customers=5, bookings=15, start=date(2024, 1, 1)))
        engine.dispose()
    assert summaries[0] == summaries[1]
