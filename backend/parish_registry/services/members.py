# parish_registry/services/members.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import Session

from parish_registry.models.activity import ActivityParticipant
from parish_registry.models.baptism_record import BaptismRecord
from parish_registry.models.family import Family
from parish_registry.models.marriage_record import MarriageRecord
from parish_registry.models.member import Gender, MatrimonyStatus, Member, MembershipStatus
from parish_registry.models.sacrament import Sacrament, SacramentType
from parish_registry.models.tithe import Tithe
from parish_registry.schemas.member import MemberCreate, SacramentSummary
from parish_registry.services.errors import MemberNotFoundError, ValidationError
from parish_registry.services import query

logger = logging.getLogger(__name__)


def _check_references(db: Session, data: Dict[str, Any], member_id: Optional[int] = None) -> None:
    id_number = data.get("id_number")
    if id_number:
        clash = db.execute(select(Member.id).where(Member.id_number == id_number)).scalar()
        if clash is not None and clash != member_id:
            raise ValidationError(f"id_number {id_number} is already registered")
    family_id = data.get("family_id")
    if family_id is not None and db.get(Family, family_id) is None:
        raise ValidationError(f"family_id {family_id} does not reference an existing family")


def create_member(db: Session, data: MemberCreate) -> Member:
    values = data.model_dump()
    _check_references(db, values)
    member = Member(**values)
    db.add(member)
    db.commit()
    db.refresh(member)
    logger.info("member %s created", member.id)
    return member


def get_member(db: Session, member_id: int) -> Optional[Member]:
    return db.get(Member, member_id)


def list_members(
    db: Session,
    q: Optional[str] = None,
    status: Optional[MembershipStatus] = None,
    gender: Optional[Gender] = None,
    local_church: Optional[str] = None,
    church_group: Optional[str] = None,
    skip: int = 0,
    limit: int = 50,
) -> Tuple[int, List[Member]]:
    conds = []
    if q:
        like = query.like(q)
        conds.append(
            or_(
                Member.first_name.ilike(like),
                Member.middle_name.ilike(like),
                Member.last_name.ilike(like),
                Member.id_number.ilike(like),
                Member.phone.ilike(like),
                Member.email.ilike(like),
            )
        )
    if status is not None:
        conds.append(Member.membership_status == status)
    if gender is not None:
        conds.append(Member.gender == gender)
    if local_church:
        conds.append(Member.local_church == local_church)
    if church_group:
        conds.append(Member.church_group == church_group)

    total = db.execute(select(func.count(Member.id)).where(*conds)).scalar_one()
    rows = (
        db.execute(
            select(Member)
            .where(*conds)
            .order_by(Member.last_name.asc(), Member.first_name.asc(), Member.id.asc())
            .offset(skip)
            .limit(limit)
        )
        .scalars()
        .all()
    )
    return total, list(rows)


def update_member(db: Session, member_id: int, patch: Dict[str, Any]) -> Optional[Member]:
    member = db.get(Member, member_id)
    if not member:
        return None

    _check_references(db, patch, member_id=member_id)
    for key, value in patch.items():
        setattr(member, key, value)

    db.commit()
    db.refresh(member)
    return member


def set_membership_status(db: Session, member_id: int, status: MembershipStatus) -> Member:
    member = db.get(Member, member_id)
    if member is None:
        raise MemberNotFoundError(member_id)
    member.membership_status = status
    db.commit()
    db.refresh(member)
    logger.info("member %s status set to %s", member_id, status.value)
    return member


def delete_member(db: Session, member_id: int) -> bool:
    """Delete a member together with the rows that only make sense with them.

    Baptism records, tithes, activity registrations and the member's
    sacraments go; marriage records survive with the member unlinked, since
    the other spouse's entry stands.
    """
    member = db.get(Member, member_id)
    if member is None:
        return False

    own_sacraments = select(Sacrament.id).where(Sacrament.member_id == member_id)
    try:
        db.execute(delete(BaptismRecord).where(BaptismRecord.member_id == member_id))
        db.execute(update(MarriageRecord).where(MarriageRecord.husband_id == member_id).values(husband_id=None))
        db.execute(update(MarriageRecord).where(MarriageRecord.wife_id == member_id).values(wife_id=None))
        db.execute(
            update(MarriageRecord)
            .where(MarriageRecord.sacrament_id.in_(own_sacraments))
            .values(sacrament_id=None)
        )
        db.execute(delete(Tithe).where(Tithe.member_id == member_id))
        db.execute(delete(ActivityParticipant).where(ActivityParticipant.member_id == member_id))
        db.execute(delete(Sacrament).where(Sacrament.member_id == member_id))
        db.execute(update(Family).where(Family.head_of_family_id == member_id).values(head_of_family_id=None))
        db.execute(delete(Member).where(Member.id == member_id))
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("member %s delete rolled back", member_id)
        raise

    logger.info("member %s deleted", member_id)
    return True


def sacrament_summary(db: Session, member_id: int) -> SacramentSummary:
    """Earliest date per sacrament type, read from the member's Sacrament rows."""
    if db.get(Member, member_id) is None:
        raise MemberNotFoundError(member_id)

    rows = db.execute(
        select(Sacrament.sacrament_type, func.min(Sacrament.sacrament_date))
        .where(Sacrament.member_id == member_id)
        .group_by(Sacrament.sacrament_type)
    ).all()
    first = {SacramentType(t): d for t, d in rows}

    eucharist = [d for d in (first.get(SacramentType.eucharist), first.get(SacramentType.first_communion)) if d]
    return SacramentSummary(
        member_id=member_id,
        baptism_date=first.get(SacramentType.baptism),
        eucharist_date=min(eucharist) if eucharist else None,
        confirmation_date=first.get(SacramentType.confirmation),
        marriage_date=first.get(SacramentType.marriage),
        sacraments_received=[t.value for t in SacramentType if t in first],
    )


def member_statistics(db: Session) -> Dict[str, Any]:
    cnt = func.count(Member.id)

    def _grouped(col, enum_cls) -> Dict[str, int]:
        out = {e.value: 0 for e in enum_cls}
        for key, c in db.execute(select(col, cnt).group_by(col)).all():
            if key is not None:
                out[enum_cls(key).value] = c
        return out

    by_church = db.execute(
        select(Member.local_church, cnt)
        .where(Member.local_church.is_not(None))
        .group_by(Member.local_church)
        .order_by(cnt.desc())
    ).all()

    return {
        "total_members": db.execute(select(cnt)).scalar_one(),
        "by_status": _grouped(Member.membership_status, MembershipStatus),
        "by_gender": _grouped(Member.gender, Gender),
        "by_matrimony_status": _grouped(Member.matrimony_status, MatrimonyStatus),
        "baptized": db.execute(select(cnt).where(Member.baptism_date.is_not(None))).scalar_one(),
        "confirmed": db.execute(select(cnt).where(Member.confirmation_date.is_not(None))).scalar_one(),
        "by_local_church": [{"church": name, "count": c} for name, c in by_church],
    }
