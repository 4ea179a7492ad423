"""Flight reservation data-access package."""
from .catalog import add_carrier, add_flight, get_flights, get_reservations, search
from .config import Settings, load_properties
from .database import create_session_factory, init_db, session_scope
from .dataset import generate_sample_data
from .entities import Flight, Itinerary, ReservationResult, User
from .errors import StorageError
from .identity import add_customer, hash_password, log_in, verify_password
from .ledger import ReservationLedger
from .services import FlightsDB

__all__ = [
    "FlightsDB",
    "Flight",
    "Itinerary",
    "ReservationLedger",
    "ReservationResult",
    "Settings",
    "StorageError",
    "User",
    "add_carrier",
    "add_customer",
    "add_flight",
    "create_session_factory",
    "generate_sample_data",
    "get_flights",
    "get_reservations",
    "hash_password",
    "init_db",
    "load_properties",
    "log_in",
    "search",
    "session_scope",
    "verify_password",
]
