# parish_registry/services/query.py
"""Small helpers shared by the services and the report endpoints."""
from __future__ import annotations


def like(q: str) -> str:
    """Wrap a search term for a contains-style ILIKE."""
    return f"%{q}%"


def to_float(x) -> float:
    # SUM() over Numeric comes back as Decimal, or None on no rows
    if x is None:
        return 0.0
    return float(x)
