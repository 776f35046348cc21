# backend/armory/config.py
from __future__ import annotations
import os


def _database_url() -> str:
    uri = os.environ.get("DATABASE_URL")
    # Hosted Postgres providers still hand out the legacy scheme
    if uri and uri.startswith("postgres://"):
        uri = uri.replace("postgres://", "postgresql://", 1)
    return uri or "sqlite:///armory.sqlite3"


class Config:
    # Signs bearer tokens as well as Flask sessions
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    TOKEN_MAX_AGE_SECONDS = int(os.environ.get("TOKEN_MAX_AGE_SECONDS", 24 * 60 * 60))

    # What the stock ledger does when no row exists for a (base, asset) pair:
    # "skip" | "create" | "fail"
    STOCK_MISSING_ROW_POLICY = os.environ.get("STOCK_MISSING_ROW_POLICY", "skip")

    ACTIVITY_DEFAULT_LIMIT = 10

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    CORS_ALLOWED_ORIGINS = {
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:5000",
        "http://127.0.0.1:5000",
    }


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    STOCK_MISSING_ROW_POLICY = "skip"
