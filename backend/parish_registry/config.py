# parish_registry/config.py
"""
Runtime settings read from the environment.

A `.env` file next to the process working directory is loaded first, so local
development only needs `DATABASE_URL` there.
"""
from __future__ import annotations

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


def database_url() -> str:
    return os.getenv("DATABASE_URL", "sqlite:///./parish_registry.db")


def sql_echo() -> bool:
    return _flag("SQL_ECHO")


def local_tz() -> str:
    return os.getenv("TZ", "Africa/Nairobi")


def parish_name() -> str:
    return os.getenv("PARISH_NAME", "Sacred Heart Kandara Parish")


def rbac_enforced() -> bool:
    """Return True if RBAC should be enforced (production), False in dev."""
    return _flag("RBAC_ENFORCE")


def api_key_pepper() -> str:
    return os.getenv("API_KEY_PEPPER", "")


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def cors_origins() -> List[str]:
    raw = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173",
    )
    return [o.strip() for o in raw.split(",") if o.strip()]
