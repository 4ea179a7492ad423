"""Connection and booking settings for the flights database."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

DEFAULT_URL = "sqlite+pysqlite:///flights.db"
DEFAULT_MAX_FLIGHT_BOOKINGS = 3
DEFAULT_TIMEOUT = 5.0

_ENV_PREFIX = "FLIGHTS_DB_"
_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}

# keys used by the legacy flightservice properties file
_PROPERTY_KEYS = {
    "flightservice.url": "url",
    "flightservice.username": "username",
    "flightservice.password": "password",
}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    url: str = DEFAULT_URL
    username: Optional[str] = None
    password: Optional[str] = None
    max_flight_bookings: int = DEFAULT_MAX_FLIGHT_BOOKINGS
    transaction_timeout: float = DEFAULT_TIMEOUT
    legacy_day_of_month: bool = False
    echo: bool = False

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("a database url is required")
        if self.max_flight_bookings < 1:
            raise ValueError("max_flight_bookings must be at least 1")
        if self.transaction_timeout <= 0:
            raise ValueError("transaction_timeout must be positive")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from ``FLIGHTS_DB_*`` environment variables."""

        env = os.environ if environ is None else environ

        def get(key: str) -> Optional[str]:
            return env.get(_ENV_PREFIX + key)

        kwargs: Dict[str, object] = {}
        if get("URL"):
            kwargs["url"] = get("URL")
        if get("USERNAME"):
            kwargs["username"] = get("USERNAME")
        if get("PASSWORD"):
            kwargs["password"] = get("PASSWORD")
        raw = get("MAX_BOOKINGS")
        if raw:
            try:
                kwargs["max_flight_bookings"] = int(raw)
            except ValueError as exc:
                raise ValueError(f"{_ENV_PREFIX}MAX_BOOKINGS must be an integer, got {raw!r}") from exc
        raw = get("TIMEOUT")
        if raw:
            try:
                kwargs["transaction_timeout"] = float(raw)
            except ValueError as exc:
                raise ValueError(f"{_ENV_PREFIX}TIMEOUT must be a number, got {raw!r}") from exc
        raw = get("LEGACY_DAY_OF_MONTH")
        if raw is not None:
            kwargs["legacy_day_of_month"] = _parse_bool(_ENV_PREFIX + "LEGACY_DAY_OF_MONTH", raw)
        raw = get("ECHO")
        if raw is not None:
            kwargs["echo"] = _parse_bool(_ENV_PREFIX + "ECHO", raw)
        return cls(**kwargs)

    @classmethod
    def from_properties(cls, properties: Mapping[str, str], base: "Settings" | None = None) -> "Settings":
        """Overlay ``flightservice.*`` connection properties on ``base``."""

        overrides = {
            field: properties[key]
            for key, field in _PROPERTY_KEYS.items()
            if properties.get(key)
        }
        return replace(base or cls(), **overrides)

    def with_url(self, url: str) -> "Settings":
        return replace(self, url=url)


def load_properties(path: str | Path) -> Dict[str, str]:
    """Read a Java-style ``key=value`` properties file."""

    properties: Dict[str, str] = {}
    with Path(path).open("r", encoding="utf-8") as fh:
        for line in fh:
            stripped = line.strip()
            if not stripped or stripped[0] in "#!":
                continue
            for separator in ("=", ":"):
                if separator in stripped:
                    key, value = stripped.split(separator, 1)
                    properties[key.strip()] = value.strip()
                    break
    return properties
