import pytest

from flights_db.database import session_scope
from flights_db.errors import StorageError
from flights_db.identity import add_customer, hash_password, log_in, verify_password
from flights_db.models import Customer


def test_login_with_wrong_secret_returns_none(session_factory, world):
    with session_scope(session_factory) as session:
        assert log_in(session, "alice", "wrong-secret") is None


def test_login_with_correct_secret_returns_user(session_factory, world):
    with session_scope(session_factory) as session:
        user = log_in(session, "alice", "correct-secret")
    assert user == world.users["alice"]
    assert user.handle == "alice"
    assert user.name == "Alice"


def test_login_with_unknown_handle_returns_none(session_factory, world):
    with session_scope(session_factory) as session:
        assert log_in(session, "mallory", "correct-secret") is None


def test_passwords_are_stored_as_salted_hashes(session_factory, world):
    with session_scope(session_factory) as session:
        stored = session.get(Customer, world.users["alice"].uid).password
    assert stored != "correct-secret"
    assert verify_password("correct-secret", stored)
    assert hash_password("correct-secret") != hash_password("correct-secret")


def test_duplicate_handle_is_a_storage_error(session_factory, world):
    with pytest.raises(StorageError):
        with session_scope(session_factory) as session:
            add_customer(session, handle="alice", password="other", name="Other Alice")
    with session_scope(session_factory) as session:
        assert session.query(Customer).filter_by(handle="alice").count() == 1
