from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from parish_registry.models.family import Family
from parish_registry.models.member import Member
from parish_registry.schemas.family import FamilyCreate
from parish_registry.services.errors import ValidationError
from parish_registry.services import query

logger = logging.getLogger(__name__)


def _check(db: Session, data: Dict[str, Any], family_id: Optional[int] = None) -> None:
    code = data.get("family_code")
    if code:
        clash = db.execute(select(Family.id).where(Family.family_code == code)).scalar()
        if clash is not None and clash != family_id:
            raise ValidationError(f"family_code {code} is already in use")
    head = data.get("head_of_family_id")
    if head is not None and db.get(Member, head) is None:
        raise ValidationError(f"head_of_family_id {head} does not reference an existing member")


def create_family(db: Session, data: FamilyCreate) -> Family:
    values = data.model_dump()
    _check(db, values)
    family = Family(**values)
    db.add(family)
    db.flush()

    # The head belongs to the family they lead
    if family.head_of_family_id is not None:
        db.get(Member, family.head_of_family_id).family_id = family.id

    db.commit()
    db.refresh(family)
    logger.info("family %s created", family.id)
    return family


def get_family(db: Session, family_id: int) -> Optional[Family]:
    return db.get(Family, family_id)


def list_families(db: Session, q: Optional[str] = None, skip: int = 0, limit: int = 100) -> List[Family]:
    stmt = select(Family)
    if q:
        like = query.like(q)
        stmt = stmt.where(Family.family_name.ilike(like) | Family.family_code.ilike(like))
    return list(db.execute(stmt.order_by(Family.family_name.asc()).offset(skip).limit(limit)).scalars().all())


def update_family(db: Session, family_id: int, patch: Dict[str, Any]) -> Optional[Family]:
    family = db.get(Family, family_id)
    if not family:
        return None

    _check(db, patch, family_id=family_id)
    for key, value in patch.items():
        setattr(family, key, value)
    if patch.get("head_of_family_id") is not None:
        db.get(Member, patch["head_of_family_id"]).family_id = family.id

    db.commit()
    db.refresh(family)
    return family


def delete_family(db: Session, family_id: int) -> bool:
    family = db.get(Family, family_id)
    if not family:
        return False

    db.execute(update(Member).where(Member.family_id == family_id).values(family_id=None))
    db.execute(delete(Family).where(Family.id == family_id))
    db.commit()
    logger.info("family %s deleted", family_id)
    return True
