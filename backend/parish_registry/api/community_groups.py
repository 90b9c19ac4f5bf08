# parish_registry/api/community_groups.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from parish_registry.db import get_db
from parish_registry.schemas.member import MemberRead
from parish_registry.services import community_groups as svc
from parish_registry.services.errors import RecordNotFoundError

router = APIRouter(prefix="/community-groups", tags=["Community Groups"])


@router.get("/")
def list_groups(
    search: Optional[str] = None,
    sort: str = Query("members_count", pattern="^(name|members_count|active_members|inactive_members)$"),
    direction: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
):
    return svc.group_statistics(db, search=search, sort=sort, direction=direction)


@router.get("/statistics")
def group_statistics(db: Session = Depends(get_db)):
    return svc.group_statistics(db)


@router.get("/{group}")
def get_group(
    group: str,
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
):
    try:
        details, total, members = svc.get_group(db, group, search=search, skip=skip, limit=limit)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))

    return {
        "group": details,
        "members": {
            "total": total,
            "items": [MemberRead.model_validate(m).model_dump(mode="json") for m in members],
        },
    }
