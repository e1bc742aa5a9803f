# backend/cashdesk/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/cashdesk.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///cashdesk.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Opening with an empty drawer is allowed unless the business says otherwise
    CASHDESK_REQUIRE_POSITIVE_OPENING = _env_flag("CASHDESK_REQUIRE_POSITIVE_OPENING")

    # Require an itemized closing count instead of a bare total
    CASHDESK_REQUIRE_END_COUNT = _env_flag("CASHDESK_REQUIRE_END_COUNT")

    CASHDESK_CURRENCY_SYMBOL = os.environ.get("CASHDESK_CURRENCY_SYMBOL", "$")
