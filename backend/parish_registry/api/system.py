# parish_registry/api/system.py
from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter
from sqlalchemy import text

from parish_registry import __version__, config
from parish_registry.db import DATABASE_URL, engine

router = APIRouter(tags=["ops"])


def _db_driver_from_url(url: str | None) -> str | None:
    if not url or "://" not in url:
        return None
    scheme = url.split("://", 1)[0]  # e.g., "postgresql+psycopg2"
    if "+" in scheme:
        return scheme.split("+", 1)[1]  # "psycopg2"
    return scheme


@router.get("/health")
def health():
    """Liveness check with a one-row DB query and local time."""
    tz = config.local_tz()
    now_local = datetime.now(ZoneInfo(tz)).isoformat()

    db = {"status": "ok", "driver": _db_driver_from_url(DATABASE_URL)}
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        db["status"] = f"error: {type(e).__name__}"

    return {
        "status": "ok",
        "time": {"tz": tz, "now": now_local},
        "db": db,
    }


@router.get("/version")
def version():
    """Minimal runtime info; confirms DB driver for the UI."""
    return {
        "app": "Parish Registry Backend",
        "version": __version__,
        "parish": config.parish_name(),
        "db_driver": _db_driver_from_url(DATABASE_URL),
        "tz": config.local_tz(),
    }
