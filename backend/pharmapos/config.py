# backend/pharmapos/config.py
from __future__ import annotations
import os


class Config:
    # SQLite DB stored in backend/instance/pharmapos.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///pharmapos.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Upper bound on waiting for a product/sale row lock (PostgreSQL only)
    STOCK_LOCK_TIMEOUT_MS = int(os.environ.get("STOCK_LOCK_TIMEOUT_MS", "5000"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
