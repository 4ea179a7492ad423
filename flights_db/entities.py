"""Value objects handed to callers of the flights database."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Tuple

from .models import Customer, FlightRecord


class ReservationResult(str, Enum):
    ADDED = "added"
    FLIGHT_FULL = "flight_full"
    DAY_FULL = "day_full"


@dataclass(frozen=True)
class User:
    uid: int
    handle: str
    name: str

    @classmethod
    def from_record(cls, record: Customer) -> "User":
        return cls(uid=record.uid, handle=record.handle, name=record.name)


@dataclass(frozen=True)
class Flight:
    fid: int
    date: date
    carrier: str
    flight_num: str
    origin_city: str
    dest_city: str
    duration: int

    @classmethod
    def from_record(cls, record: FlightRecord, carrier: str) -> "Flight":
        return cls(
            fid=record.fid,
            date=date(record.year, record.month_id, record.day_of_month),
            carrier=carrier,
            flight_num=record.flight_num,
            origin_city=record.origin_city,
            dest_city=record.dest_city,
            duration=int(record.actual_time or 0),
        )


@dataclass(frozen=True)
class Itinerary:
    """One direct flight, or two flights chained through a connecting city."""

    flights: Tuple[Flight, ...]

    def __post_init__(self) -> None:
        if len(self.flights) not in (1, 2):
            raise ValueError("an itinerary holds one or two flights")
        if len(self.flights) == 2 and self.flights[0].dest_city != self.flights[1].origin_city:
            raise ValueError("connecting flights must share the intermediate city")

    @property
    def is_direct(self) -> bool:
        return len(self.flights) == 1

    @property
    def total_time(self) -> int:
        return sum(flight.duration for flight in self.flights)

    @property
    def origin_city(self) -> str:
        return self.flights[0].origin_city

    @property
    def dest_city(self) -> str:
        return self.flights[-1].dest_city

    def __iter__(self):
        return iter(self.flights)

    def __len__(self) -> int:
        return len(self.flights)
