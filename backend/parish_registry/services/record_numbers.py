# parish_registry/services/record_numbers.py
"""
Human-readable register numbers: ``<PREFIX>-<YEAR>-<NNNNN>``.

The prefix belongs to the model (``BaptismRecord.RECORD_PREFIX`` = "BAP",
``MarriageRecord.RECORD_PREFIX`` = "MAR"); numbering restarts each year.
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session


def format_record_number(prefix: str, year: int, sequence: int) -> str:
    return f"{prefix}-{year}-{sequence:05d}"


def _sequence_of(record_number: str) -> Optional[int]:
    tail = record_number.rsplit("-", 1)[-1]
    return int(tail) if tail.isdigit() else None


def next_record_number(db: Session, model, today: Optional[date] = None) -> str:
    """Return the next unused number for `model` in the current year.

    Manually entered numbers with a non-numeric tail are ignored when picking
    the next sequence.
    """
    year = (today or date.today()).year
    prefix = model.RECORD_PREFIX
    col = model.record_number

    existing = db.execute(select(col).where(col.like(f"{prefix}-{year}-%"))).scalars().all()
    sequences = [s for s in (_sequence_of(n) for n in existing) if s is not None]
    return format_record_number(prefix, year, max(sequences, default=0) + 1)
