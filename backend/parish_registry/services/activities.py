# parish_registry/services/activities.py
"""
Activity calendar and participant registration.

"Upcoming" means starting today or later and neither cancelled nor
completed. Participation is one row per (activity, member).
"""
from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import delete, extract, func, or_, select
from sqlalchemy.orm import Session

from parish_registry.models.activity import Activity, ActivityParticipant, ActivityStatus, ActivityType
from parish_registry.models.member import Member
from parish_registry.schemas.activity import ActivityCreate, ParticipantCreate
from parish_registry.services import query
from parish_registry.services.errors import MemberNotFoundError, RecordNotFoundError, ValidationError

logger = logging.getLogger(__name__)

_CLOSED = (ActivityStatus.cancelled, ActivityStatus.completed)


def _check_schedule(activity: Activity) -> None:
    """Same rules as the request schema, applied to the merged row after a patch."""
    if activity.end_date is not None and activity.end_date < activity.start_date:
        raise ValidationError("end_date must be on or after start_date")
    if activity.start_time is not None and activity.end_time is not None and activity.end_time <= activity.start_time:
        raise ValidationError("end_time must be after start_time")
    if activity.registration_deadline is not None and activity.registration_deadline.date() > activity.start_date:
        raise ValidationError("registration_deadline must be on or before start_date")


def _get_or_raise(db: Session, activity_id: int) -> Activity:
    activity = db.get(Activity, activity_id)
    if activity is None:
        raise RecordNotFoundError(f"Activity {activity_id} not found")
    return activity


# ─────────────────────────────────────────────────────────────────────────────
# Activities
# ─────────────────────────────────────────────────────────────────────────────

def create_activity(db: Session, payload: ActivityCreate) -> Activity:
    activity = Activity(**payload.model_dump())
    db.add(activity)
    db.commit()
    db.refresh(activity)
    logger.info("activity %s (%s) created for %s", activity.id, activity.activity_type.value, activity.start_date)
    return activity


def get_activity(db: Session, activity_id: int) -> Optional[Activity]:
    return db.get(Activity, activity_id)


def list_activities(
    db: Session,
    q: Optional[str] = None,
    activity_type: Optional[ActivityType] = None,
    status: Optional[ActivityStatus] = None,
    church_group: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    skip: int = 0,
    limit: int = 15,
) -> Tuple[int, List[Activity]]:
    conds = []
    if q:
        like = query.like(q)
        conds.append(
            or_(
                Activity.title.ilike(like),
                Activity.description.ilike(like),
                Activity.location.ilike(like),
                Activity.organizer.ilike(like),
            )
        )
    if activity_type is not None:
        conds.append(Activity.activity_type == activity_type)
    if status is not None:
        conds.append(Activity.status == status)
    if church_group:
        conds.append(Activity.church_group == church_group)
    if date_from is not None:
        conds.append(Activity.start_date >= date_from)
    if date_to is not None:
        conds.append(Activity.start_date <= date_to)

    total = db.execute(select(func.count(Activity.id)).where(*conds)).scalar_one()
    rows = (
        db.execute(
            select(Activity)
            .where(*conds)
            .order_by(Activity.start_date.desc(), Activity.id.desc())
            .offset(skip)
            .limit(limit)
        )
        .scalars()
        .all()
    )
    return total, list(rows)


def search_activities(db: Session, q: str, limit: int = 20) -> List[Activity]:
    _, rows = list_activities(db, q=q, limit=limit)
    return rows


def upcoming_activities(db: Session, today: Optional[date] = None, limit: int = 10) -> List[Activity]:
    today = today or date.today()
    return list(
        db.execute(
            select(Activity)
            .where(Activity.start_date >= today, Activity.status.not_in(_CLOSED))
            .order_by(Activity.start_date.asc(), Activity.id.asc())
            .limit(limit)
        )
        .scalars()
        .all()
    )


def update_activity(db: Session, activity_id: int, patch: Dict[str, Any]) -> Optional[Activity]:
    activity = db.get(Activity, activity_id)
    if activity is None:
        return None

    for key, value in patch.items():
        setattr(activity, key, value)
    try:
        _check_schedule(activity)
    except ValidationError:
        db.rollback()
        raise

    db.commit()
    db.refresh(activity)
    return activity


def delete_activity(db: Session, activity_id: int) -> bool:
    if db.get(Activity, activity_id) is None:
        return False
    delete_activities(db, [activity_id])
    return True


def delete_activities(db: Session, activity_ids: Sequence[int]) -> int:
    """Delete the given activities and their participant rows; returns how many activities went."""
    ids = list(activity_ids)
    try:
        db.execute(delete(ActivityParticipant).where(ActivityParticipant.activity_id.in_(ids)))
        deleted = db.execute(delete(Activity).where(Activity.id.in_(ids))).rowcount
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("activity delete rolled back for ids=%s", ids)
        raise

    logger.info("deleted %s activities", deleted)
    return deleted


def activity_statistics(db: Session, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    cnt = func.count(Activity.id)

    by_type = {t.value: 0 for t in ActivityType}
    for atype, c in db.execute(select(Activity.activity_type, cnt).group_by(Activity.activity_type)).all():
        by_type[ActivityType(atype).value] = c

    return {
        "total_activities": db.execute(select(cnt)).scalar_one(),
        "upcoming_activities": db.execute(
            select(cnt).where(Activity.start_date >= today, Activity.status.not_in(_CLOSED))
        ).scalar_one(),
        "active_activities": db.execute(select(cnt).where(Activity.status == ActivityStatus.active)).scalar_one(),
        "completed_activities": db.execute(
            select(cnt).where(Activity.status == ActivityStatus.completed)
        ).scalar_one(),
        "this_month_activities": db.execute(
            select(cnt).where(
                extract("year", Activity.start_date) == today.year,
                extract("month", Activity.start_date) == today.month,
            )
        ).scalar_one(),
        "activities_by_type": by_type,
    }


# ─────────────────────────────────────────────────────────────────────────────
# Participants
# ─────────────────────────────────────────────────────────────────────────────

def _participant(db: Session, activity_id: int, member_id: int) -> Optional[ActivityParticipant]:
    return (
        db.execute(
            select(ActivityParticipant).where(
                ActivityParticipant.activity_id == activity_id,
                ActivityParticipant.member_id == member_id,
            )
        )
        .scalars()
        .first()
    )


def add_participant(
    db: Session,
    activity_id: int,
    payload: ParticipantCreate,
    registered_by: Optional[uuid.UUID] = None,
) -> ActivityParticipant:
    activity = _get_or_raise(db, activity_id)
    if db.get(Member, payload.member_id) is None:
        raise MemberNotFoundError(payload.member_id)
    if _participant(db, activity_id, payload.member_id) is not None:
        raise ValidationError(f"member {payload.member_id} is already registered for activity {activity_id}")
    if activity.status in _CLOSED:
        raise ValidationError(f"activity {activity_id} is {activity.status.value}")
    if activity.max_participants is not None and activity.participant_count >= activity.max_participants:
        raise ValidationError(f"activity {activity_id} is full ({activity.max_participants} participants)")

    participant = ActivityParticipant(activity_id=activity_id, registered_by=registered_by, **payload.model_dump())
    db.add(participant)
    db.commit()
    db.refresh(participant)
    logger.info("member %s registered for activity %s as %s", participant.member_id, activity_id, participant.role.value)
    return participant


def list_participants(db: Session, activity_id: int) -> List[ActivityParticipant]:
    _get_or_raise(db, activity_id)
    return list(
        db.execute(
            select(ActivityParticipant)
            .where(ActivityParticipant.activity_id == activity_id)
            .order_by(ActivityParticipant.id.asc())
        )
        .scalars()
        .all()
    )


def update_participant(
    db: Session,
    activity_id: int,
    member_id: int,
    patch: Dict[str, Any],
) -> Optional[ActivityParticipant]:
    participant = _participant(db, activity_id, member_id)
    if participant is None:
        return None
    for key, value in patch.items():
        if value is not None:
            setattr(participant, key, value)
    db.commit()
    db.refresh(participant)
    return participant


def remove_participant(db: Session, activity_id: int, member_id: int) -> bool:
    participant = _participant(db, activity_id, member_id)
    if participant is None:
        return False
    db.delete(participant)
    db.commit()
    logger.info("member %s removed from activity %s", member_id, activity_id)
    return True


def member_activities(db: Session, member_id: int) -> List[Activity]:
    if db.get(Member, member_id) is None:
        raise MemberNotFoundError(member_id)
    return list(
        db.execute(
            select(Activity)
            .join(ActivityParticipant, ActivityParticipant.activity_id == Activity.id)
            .where(ActivityParticipant.member_id == member_id)
            .order_by(Activity.start_date.desc(), Activity.id.desc())
        )
        .scalars()
        .all()
    )
