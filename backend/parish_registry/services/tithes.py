from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import extract, func, select
from sqlalchemy.orm import Session

from parish_registry.models.member import Member
from parish_registry.models.tithe import PaymentMethod, Tithe, TitheType
from parish_registry.schemas.tithe import TitheCreate
from parish_registry.services.errors import MemberNotFoundError
from parish_registry.services.query import to_float

logger = logging.getLogger(__name__)


def _conds(
    member_id: Optional[int] = None,
    tithe_type: Optional[TitheType] = None,
    payment_method: Optional[PaymentMethod] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> list:
    conds = []
    if member_id is not None:
        conds.append(Tithe.member_id == member_id)
    if tithe_type is not None:
        conds.append(Tithe.tithe_type == tithe_type)
    if payment_method is not None:
        conds.append(Tithe.payment_method == payment_method)
    if date_from is not None:
        conds.append(Tithe.date_given >= date_from)
    if date_to is not None:
        conds.append(Tithe.date_given <= date_to)
    return conds


def create_tithe(db: Session, data: TitheCreate, recorded_by: Optional[uuid.UUID] = None) -> Tithe:
    if db.get(Member, data.member_id) is None:
        raise MemberNotFoundError(data.member_id)

    tithe = Tithe(**data.model_dump(), recorded_by=recorded_by)
    db.add(tithe)
    db.commit()
    db.refresh(tithe)
    logger.info("tithe %s of %s recorded for member_id=%s", tithe.id, tithe.amount, tithe.member_id)
    return tithe


def get_tithe(db: Session, tithe_id: int) -> Optional[Tithe]:
    return db.get(Tithe, tithe_id)


def list_tithes(db: Session, skip: int = 0, limit: int = 100, **filters: Any) -> List[Tithe]:
    stmt = (
        select(Tithe)
        .where(*_conds(**filters))
        .order_by(Tithe.date_given.desc(), Tithe.id.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())


def delete_tithe(db: Session, tithe_id: int) -> bool:
    tithe = db.get(Tithe, tithe_id)
    if not tithe:
        return False
    db.delete(tithe)
    db.commit()
    return True


def tithe_summary(db: Session, **filters: Any) -> Dict[str, Any]:
    """Totals for the filtered contributions, overall and per type / method."""
    conds = _conds(**filters)
    total_amt = func.coalesce(func.sum(Tithe.amount), 0)

    total, count = db.execute(select(total_amt, func.count(Tithe.id)).where(*conds)).one()
    by_type = db.execute(
        select(Tithe.tithe_type, total_amt).where(*conds).group_by(Tithe.tithe_type)
    ).all()
    by_method = db.execute(
        select(Tithe.payment_method, total_amt).where(*conds).group_by(Tithe.payment_method)
    ).all()

    return {
        "total_amount": to_float(total),
        "count": count,
        "by_type": {TitheType(t).value: to_float(a) for t, a in by_type},
        "by_payment_method": {PaymentMethod(m).value: to_float(a) for m, a in by_method},
    }


def monthly_totals(db: Session, year: int) -> List[Dict[str, Any]]:
    """Twelve rows, one per month of `year`, zero-filled."""
    month_col = extract("month", Tithe.date_given)
    rows = db.execute(
        select(month_col, func.coalesce(func.sum(Tithe.amount), 0), func.count(Tithe.id))
        .where(extract("year", Tithe.date_given) == year)
        .group_by(month_col)
    ).all()
    found = {int(m): (to_float(a), c) for m, a, c in rows}
    out = []
    for m in range(1, 13):
        amount, count = found.get(m, (0.0, 0))
        out.append({"month": m, "total_amount": amount, "count": count})
    return out
