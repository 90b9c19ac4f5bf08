# parish_registry/api/activities.py
from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from parish_registry.api.rbac import acting_user_id, require_permission
from parish_registry.db import get_db
from parish_registry.models.activity import ActivityStatus, ActivityType
from parish_registry.schemas.activity import (
    ActivityCreate,
    ActivityDetail,
    ActivityPage,
    ActivityRead,
    ActivityUpdate,
    BulkDelete,
    ParticipantCreate,
    ParticipantRead,
    ParticipantUpdate,
)
from parish_registry.services import activities as svc
from parish_registry.services.errors import MemberNotFoundError, RecordNotFoundError, ValidationError

router = APIRouter(prefix="/activities", tags=["Activities"])
logger = logging.getLogger(__name__)

_write = [Depends(require_permission("activities:write"))]


@router.post("/", response_model=ActivityRead, status_code=201, dependencies=_write)
def create_activity(payload: ActivityCreate, db: Session = Depends(get_db)):
    return svc.create_activity(db, payload)


@router.get("/", response_model=ActivityPage)
def list_activities(
    q: Optional[str] = None,
    activity_type: Optional[ActivityType] = None,
    status: Optional[ActivityStatus] = None,
    church_group: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(15, ge=1, le=200),
    db: Session = Depends(get_db),
):
    total, items = svc.list_activities(
        db,
        q=q,
        activity_type=activity_type,
        status=status,
        church_group=church_group,
        date_from=date_from,
        date_to=date_to,
        skip=skip,
        limit=limit,
    )
    return ActivityPage(total=total, items=[ActivityRead.model_validate(a) for a in items])


@router.get("/upcoming", response_model=List[ActivityRead])
def upcoming_activities(limit: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)):
    return svc.upcoming_activities(db, limit=limit)


@router.get("/search", response_model=List[ActivityRead])
def search_activities(q: str = Query("", max_length=100), db: Session = Depends(get_db)):
    return svc.search_activities(db, q)


@router.get("/statistics")
def activity_statistics(db: Session = Depends(get_db)):
    return svc.activity_statistics(db)


@router.post("/bulk-delete", dependencies=_write)
def bulk_delete_activities(payload: BulkDelete, db: Session = Depends(get_db)):
    deleted = svc.delete_activities(db, payload.activity_ids)
    return {"deleted": deleted}


@router.get("/{activity_id}", response_model=ActivityDetail)
def get_activity(activity_id: int, db: Session = Depends(get_db)):
    activity = svc.get_activity(db, activity_id)
    if not activity:
        raise HTTPException(status_code=404, detail="Activity not found")
    return activity


@router.patch("/{activity_id}", response_model=ActivityRead, dependencies=_write)
def update_activity(activity_id: int, payload: ActivityUpdate, db: Session = Depends(get_db)):
    patch = payload.model_dump(exclude_unset=True)
    for key in ("title", "activity_type", "start_date", "status", "registration_required"):
        if key in patch and patch[key] is None:
            patch.pop(key)
    logger.info("update_activity id=%s fields=%s", activity_id, list(patch))

    try:
        activity = svc.update_activity(db, activity_id, patch)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    if not activity:
        raise HTTPException(status_code=404, detail="Activity not found")
    return activity


@router.delete("/{activity_id}", status_code=204, response_class=Response, dependencies=_write)
def delete_activity(activity_id: int, db: Session = Depends(get_db)) -> Response:
    if not svc.delete_activity(db, activity_id):
        raise HTTPException(status_code=404, detail="Activity not found")
    return Response(status_code=204)


# ---- Participants --------------------------------------------------------------

@router.get("/{activity_id}/participants", response_model=List[ParticipantRead])
def list_participants(activity_id: int, db: Session = Depends(get_db)):
    try:
        return svc.list_participants(db, activity_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.post("/{activity_id}/participants", response_model=ParticipantRead, status_code=201)
def add_participant(
    activity_id: int,
    payload: ParticipantCreate,
    db: Session = Depends(get_db),
    user=Depends(require_permission("activities:write")),
):
    try:
        return svc.add_participant(db, activity_id, payload, registered_by=acting_user_id(user))
    except (RecordNotFoundError, MemberNotFoundError) as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


@router.patch("/{activity_id}/participants/{member_id}", response_model=ParticipantRead, dependencies=_write)
def update_participant(activity_id: int, member_id: int, payload: ParticipantUpdate, db: Session = Depends(get_db)):
    participant = svc.update_participant(db, activity_id, member_id, payload.model_dump(exclude_unset=True))
    if not participant:
        raise HTTPException(status_code=404, detail="Participant not found")
    return participant


@router.delete(
    "/{activity_id}/participants/{member_id}",
    status_code=204,
    response_class=Response,
    dependencies=_write,
)
def remove_participant(activity_id: int, member_id: int, db: Session = Depends(get_db)) -> Response:
    if not svc.remove_participant(db, activity_id, member_id):
        raise HTTPException(status_code=404, detail="Participant not found")
    return Response(status_code=204)
