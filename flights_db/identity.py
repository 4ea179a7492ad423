"""Customer credentials and login."""
from __future__ import annotations

import logging
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.orm import Session

from .entities import User
from .models import Customer

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    return pwd_context.verify(password, hashed_password)


def add_customer(session: Session, *, handle: str, password: str, name: str) -> User:
    """Register a customer; only the salted hash of ``password`` is stored."""

    customer = Customer(handle=handle, password=hash_password(password), name=name)
    session.add(customer)
    session.flush()
    return User.from_record(customer)


def log_in(session: Session, handle: str, password: str) -> Optional[User]:
    """Return the user matching the credentials, or ``None``."""

    customer = session.scalars(select(Customer).where(Customer.handle == handle).limit(1)).first()
    if customer is None:
        # keep the timing of unknown handles close to a failed verification
        pwd_context.dummy_verify()
        logger.info("login failed for unknown handle %r", handle)
        return None
    if not verify_password(password, customer.password):
        logger.info("login failed for %r", handle)
        return None
    logger.debug("login succeeded for %r", handle)
    return User.from_record(customer)
