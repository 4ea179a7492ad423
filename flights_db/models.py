"""SQLAlchemy models for the flight reservation store."""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class Customer(Base):
    __tablename__ = "CUSTOMER"
    __table_args__ = (UniqueConstraint("handle", name="uq_customer_handle"),)

    uid: Mapped[int] = mapped_column(primary_key=True)
    handle: Mapped[str] = mapped_column(String(50), nullable=False)
    # salted hash produced by identity.hash_password
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    reservations: Mapped[List["Reservation"]] = relationship(
        back_populates="customer", cascade="all, delete-orphan"
    )


class Carrier(Base):
    __tablename__ = "CARRIERS"

    cid: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    flights: Mapped[List["FlightRecord"]] = relationship(back_populates="carrier")


class FlightRecord(Base):
    __tablename__ = "FLIGHTS"
    __table_args__ = (
        CheckConstraint("month_id BETWEEN 1 AND 12", name="ck_flight_month"),
        CheckConstraint("day_of_month BETWEEN 1 AND 31", name="ck_flight_day"),
        CheckConstraint("actual_time IS NULL OR actual_time >= 0", name="ck_flight_time"),
        Index("ix_flights_route_day", "year", "month_id", "day_of_month", "origin_city", "dest_city"),
    )

    fid: Mapped[int] = mapped_column(primary_key=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month_id: Mapped[int] = mapped_column(Integer, nullable=False)
    day_of_month: Mapped[int] = mapped_column(Integer, nullable=False)
    carrier_id: Mapped[int] = mapped_column(ForeignKey("CARRIERS.cid"), nullable=False)
    flight_num: Mapped[str] = mapped_column(String(10), nullable=False)
    origin_city: Mapped[str] = mapped_column(String(50), nullable=False)
    dest_city: Mapped[str] = mapped_column(String(50), nullable=False)
    actual_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    carrier: Mapped[Carrier] = relationship(back_populates="flights")
    reservations: Mapped[List["Reservation"]] = relationship(back_populates="flight")


class Reservation(Base):
    __tablename__ = "RESERVATION"

    uid: Mapped[int] = mapped_column(ForeignKey("CUSTOMER.uid", ondelete="CASCADE"), primary_key=True)
    fid: Mapped[int] = mapped_column(ForeignKey("FLIGHTS.fid", ondelete="CASCADE"), primary_key=True, index=True)

    customer: Mapped[Customer] = relationship(back_populates="reservations")
    flight: Mapped[FlightRecord] = relationship(back_populates="reservations")
