# parish_registry/services/sacraments.py
from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import extract, func, or_, select, update
from sqlalchemy.orm import Session

from parish_registry.models.baptism_record import BaptismRecord
from parish_registry.models.marriage_record import MarriageRecord
from parish_registry.models.member import Member
from parish_registry.models.sacrament import Sacrament, SacramentType
from parish_registry.schemas.sacrament import SacramentCreate
from parish_registry.services.errors import MemberNotFoundError
from parish_registry.services import query

logger = logging.getLogger(__name__)

# BaptismRecord columns that may point at a Sacrament row
_BAPTISM_LINKS = (
    BaptismRecord.baptism_sacrament_id,
    BaptismRecord.eucharist_sacrament_id,
    BaptismRecord.confirmation_sacrament_id,
    BaptismRecord.marriage_sacrament_id,
)


# ─────────────────────────────────────────────────────────────────────────────
# Public service API used by parish_registry/api/sacraments.py
# ─────────────────────────────────────────────────────────────────────────────

def create_sacrament(
    db: Session,
    payload: SacramentCreate,
    recorded_by: Optional[uuid.UUID] = None,
) -> Sacrament:
    if db.get(Member, payload.member_id) is None:
        raise MemberNotFoundError(payload.member_id)

    sac = Sacrament(**payload.model_dump(), recorded_by=recorded_by)
    db.add(sac)
    db.commit()
    db.refresh(sac)
    logger.info("sacrament %s (%s) recorded for member_id=%s", sac.id, sac.sacrament_type.value, sac.member_id)
    return sac


def get_sacrament(db: Session, sac_id: int) -> Optional[Sacrament]:
    return db.get(Sacrament, sac_id)


def list_sacraments(
    db: Session,
    sacrament_type: Optional[SacramentType] = None,
    member_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> Tuple[int, List[Sacrament]]:
    conds = []
    if sacrament_type is not None:
        conds.append(Sacrament.sacrament_type == sacrament_type)
    if member_id is not None:
        conds.append(Sacrament.member_id == member_id)
    if date_from is not None:
        conds.append(Sacrament.sacrament_date >= date_from)
    if date_to is not None:
        conds.append(Sacrament.sacrament_date <= date_to)
    if search:
        like = query.like(search)
        conds.append(
            or_(
                Sacrament.location.ilike(like),
                Sacrament.celebrant.ilike(like),
                Sacrament.certificate_number.ilike(like),
                Sacrament.member_id.in_(
                    select(Member.id).where(or_(Member.first_name.ilike(like), Member.last_name.ilike(like)))
                ),
            )
        )

    total = db.execute(select(func.count(Sacrament.id)).where(*conds)).scalar_one()
    rows = (
        db.execute(
            select(Sacrament)
            .where(*conds)
            .order_by(Sacrament.sacrament_date.desc(), Sacrament.id.desc())
            .offset(skip)
            .limit(limit)
        )
        .scalars()
        .all()
    )
    return total, list(rows)


def list_member_sacraments(db: Session, member_id: int) -> List[Sacrament]:
    if db.get(Member, member_id) is None:
        raise MemberNotFoundError(member_id)
    return list(
        db.execute(
            select(Sacrament)
            .where(Sacrament.member_id == member_id)
            .order_by(Sacrament.sacrament_date.asc(), Sacrament.id.asc())
        )
        .scalars()
        .all()
    )


def update_sacrament(db: Session, sac_id: int, patch: Dict[str, Any]) -> Optional[Sacrament]:
    sac = db.get(Sacrament, sac_id)
    if not sac:
        return None

    if patch.get("member_id") is not None and db.get(Member, patch["member_id"]) is None:
        raise MemberNotFoundError(patch["member_id"])

    for key, value in patch.items():
        setattr(sac, key, value)

    db.commit()
    db.refresh(sac)
    return sac


def delete_sacrament(db: Session, sac_id: int) -> bool:
    """Delete a Sacrament row, clearing any register entries that link to it."""
    sac = db.get(Sacrament, sac_id)
    if not sac:
        return False

    try:
        for col in _BAPTISM_LINKS:
            db.execute(update(BaptismRecord).where(col == sac_id).values({col.key: None}))
        db.execute(
            update(MarriageRecord).where(MarriageRecord.sacrament_id == sac_id).values(sacrament_id=None)
        )
        db.delete(sac)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("sacrament %s delete rolled back", sac_id)
        raise

    logger.info("sacrament %s deleted", sac_id)
    return True


def sacrament_statistics(db: Session, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    year_col = extract("year", Sacrament.sacrament_date)
    month_col = extract("month", Sacrament.sacrament_date)
    cnt = func.count(Sacrament.id)

    total = db.execute(select(cnt)).scalar_one()
    this_year = db.execute(select(cnt).where(year_col == today.year)).scalar_one()
    this_month = db.execute(select(cnt).where(year_col == today.year, month_col == today.month)).scalar_one()

    by_type = {t.value: 0 for t in SacramentType}
    for stype, c in db.execute(select(Sacrament.sacrament_type, cnt).group_by(Sacrament.sacrament_type)).all():
        by_type[SacramentType(stype).value] = c

    by_month = db.execute(
        select(month_col, cnt).where(year_col == today.year).group_by(month_col).order_by(month_col)
    ).all()

    return {
        "total": total,
        "this_year": this_year,
        "this_month": this_month,
        "by_type": by_type,
        "by_month": [{"month": int(m), "count": c} for m, c in by_month],
    }
