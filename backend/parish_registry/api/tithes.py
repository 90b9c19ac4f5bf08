from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from parish_registry.api.rbac import acting_user_id, require_permission
from parish_registry.db import get_db
from parish_registry.models.tithe import PaymentMethod, TitheType
from parish_registry.schemas.tithe import TitheCreate, TitheOut
from parish_registry.services import tithes as svc
from parish_registry.services.errors import MemberNotFoundError

router = APIRouter(prefix="/tithes", tags=["Tithes"])


@router.post("/", response_model=TitheOut, status_code=201)
def create_tithe(
    payload: TitheCreate,
    db: Session = Depends(get_db),
    user=Depends(require_permission("tithes:write")),
):
    try:
        return svc.create_tithe(db, payload, recorded_by=acting_user_id(user))
    except MemberNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/", response_model=List[TitheOut], summary="List contributions")
def list_tithes(
    member_id: Optional[int] = None,
    tithe_type: Optional[TitheType] = None,
    payment_method: Optional[PaymentMethod] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    skip: int = 0,
    limit: int = Query(100, le=500),
    db: Session = Depends(get_db),
):
    return svc.list_tithes(
        db,
        skip=skip,
        limit=limit,
        member_id=member_id,
        tithe_type=tithe_type,
        payment_method=payment_method,
        date_from=date_from,
        date_to=date_to,
    )


@router.get("/summary", summary="Totals by type and payment method")
def tithe_summary(
    member_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
):
    return svc.tithe_summary(db, member_id=member_id, date_from=date_from, date_to=date_to)


@router.get("/{tithe_id}", response_model=TitheOut)
def get_tithe(tithe_id: int, db: Session = Depends(get_db)):
    tithe = svc.get_tithe(db, tithe_id)
    if not tithe:
        raise HTTPException(status_code=404, detail="Tithe not found")
    return tithe


@router.delete(
    "/{tithe_id}",
    status_code=204,
    response_class=Response,
    dependencies=[Depends(require_permission("tithes:write"))],
)
def delete_tithe(tithe_id: int, db: Session = Depends(get_db)) -> Response:
    if not svc.delete_tithe(db, tithe_id):
        raise HTTPException(status_code=404, detail="Tithe not found")
    return Response(status_code=204)
