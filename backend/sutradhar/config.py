# backend/sutradhar/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/sutradhar.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///sutradhar.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Checkout pricing (rupees)
    SHIPPING_FEE = float(os.environ.get("SHIPPING_FEE", "200"))
    FREE_SHIPPING_THRESHOLD = float(os.environ.get("FREE_SHIPPING_THRESHOLD", "5000"))
    TAX_RATE = float(os.environ.get("TAX_RATE", "0.05"))
    POINTS_PER_RUPEE_DIVISOR = int(os.environ.get("POINTS_PER_RUPEE_DIVISOR", "100"))

    # One transaction for all seller orders of a checkout. When False each
    # seller order commits separately and a failure can leave placed orders.
    CHECKOUT_ATOMIC = _env_bool("CHECKOUT_ATOMIC", True)

    CORS_ALLOWED_ORIGINS = {
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:8080",
        "http://127.0.0.1:8080",
    }
