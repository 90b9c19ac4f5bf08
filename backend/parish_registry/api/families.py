from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from parish_registry.api.rbac import require_permission
from parish_registry.db import get_db
from parish_registry.schemas.family import FamilyCreate, FamilyRead, FamilyUpdate
from parish_registry.services import families as svc
from parish_registry.services.errors import ValidationError

router = APIRouter(prefix="/families", tags=["Families"])

_write = [Depends(require_permission("members:write"))]


@router.post("/", response_model=FamilyRead, status_code=201, dependencies=_write)
def create_family(payload: FamilyCreate, db: Session = Depends(get_db)):
    try:
        return svc.create_family(db, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


@router.get("/", response_model=List[FamilyRead])
def list_families(q: Optional[str] = None, skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return svc.list_families(db, q=q, skip=skip, limit=limit)


@router.get("/{family_id}", response_model=FamilyRead)
def get_family(family_id: int, db: Session = Depends(get_db)):
    family = svc.get_family(db, family_id)
    if not family:
        raise HTTPException(status_code=404, detail="Family not found")
    return family


@router.patch("/{family_id}", response_model=FamilyRead, dependencies=_write)
def update_family(family_id: int, payload: FamilyUpdate, db: Session = Depends(get_db)):
    patch = payload.model_dump(exclude_unset=True)
    if "family_name" in patch and patch["family_name"] is None:
        patch.pop("family_name")
    try:
        family = svc.update_family(db, family_id, patch)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    if not family:
        raise HTTPException(status_code=404, detail="Family not found")
    return family


@router.delete("/{family_id}", status_code=204, response_class=Response, dependencies=_write)
def delete_family(family_id: int, db: Session = Depends(get_db)) -> Response:
    if not svc.delete_family(db, family_id):
        raise HTTPException(status_code=404, detail="Family not found")
    return Response(status_code=204)
