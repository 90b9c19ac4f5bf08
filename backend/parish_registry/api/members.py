from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from parish_registry.api.rbac import require_permission
from parish_registry.db import get_db
from parish_registry.models.member import Gender, MembershipStatus
from parish_registry.schemas.activity import ActivityRead
from parish_registry.schemas.member import (
    MemberCreate,
    MemberPage,
    MemberRead,
    MemberStatusUpdate,
    MemberUpdate,
    SacramentSummary,
)
from parish_registry.schemas.sacrament import SacramentRead
from parish_registry.services import activities as activities_svc
from parish_registry.services import members as svc
from parish_registry.services import sacraments as sacraments_svc
from parish_registry.services.errors import MemberNotFoundError, ValidationError

router = APIRouter(prefix="/members", tags=["Members"])
logger = logging.getLogger(__name__)

_write = [Depends(require_permission("members:write"))]


@router.post("/", response_model=MemberRead, status_code=201, dependencies=_write)
def create_member(payload: MemberCreate, db: Session = Depends(get_db)):
    try:
        return svc.create_member(db, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


@router.get("/", response_model=MemberPage)
def list_members(
    q: Optional[str] = None,
    status: Optional[MembershipStatus] = None,
    gender: Optional[Gender] = None,
    local_church: Optional[str] = None,
    church_group: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    total, items = svc.list_members(
        db,
        q=q,
        status=status,
        gender=gender,
        local_church=local_church,
        church_group=church_group,
        skip=skip,
        limit=limit,
    )
    return MemberPage(total=total, items=[MemberRead.model_validate(m) for m in items])


@router.get("/statistics")
def member_statistics(db: Session = Depends(get_db)):
    return svc.member_statistics(db)


@router.get("/{member_id}", response_model=MemberRead)
def get_member(member_id: int, db: Session = Depends(get_db)):
    member = svc.get_member(db, member_id)
    if not member:
        raise HTTPException(status_code=404, detail="Member not found")
    return member


@router.patch("/{member_id}", response_model=MemberRead, dependencies=_write)
def update_member(member_id: int, payload: MemberUpdate, db: Session = Depends(get_db)):
    patch = payload.model_dump(exclude_unset=True)
    for key in ("first_name", "last_name", "membership_status", "matrimony_status"):
        if key in patch and patch[key] is None:
            patch.pop(key)
    logger.info("update_member id=%s fields=%s", member_id, list(patch))

    try:
        member = svc.update_member(db, member_id, patch)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    if not member:
        raise HTTPException(status_code=404, detail="Member not found")
    return member


@router.patch("/{member_id}/status", response_model=MemberRead, dependencies=_write)
def update_member_status(member_id: int, payload: MemberStatusUpdate, db: Session = Depends(get_db)):
    try:
        return svc.set_membership_status(db, member_id, payload.membership_status)
    except MemberNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.delete("/{member_id}", status_code=204, response_class=Response, dependencies=_write)
def delete_member(member_id: int, db: Session = Depends(get_db)) -> Response:
    if not svc.delete_member(db, member_id):
        raise HTTPException(status_code=404, detail="Member not found")
    return Response(status_code=204)


@router.get("/{member_id}/sacraments", response_model=List[SacramentRead])
def member_sacraments(member_id: int, db: Session = Depends(get_db)):
    try:
        return sacraments_svc.list_member_sacraments(db, member_id)
    except MemberNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/{member_id}/sacrament-summary", response_model=SacramentSummary)
def member_sacrament_summary(member_id: int, db: Session = Depends(get_db)):
    try:
        return svc.sacrament_summary(db, member_id)
    except MemberNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/{member_id}/activities", response_model=List[ActivityRead])
def member_activities(member_id: int, db: Session = Depends(get_db)):
    try:
        return activities_svc.member_activities(db, member_id)
    except MemberNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
