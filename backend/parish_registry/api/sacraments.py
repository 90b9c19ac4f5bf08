# parish_registry/api/sacraments.py
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from parish_registry.api.rbac import acting_user_id, require_permission
from parish_registry.db import get_db
from parish_registry.models.sacrament import SacramentType
from parish_registry.schemas.sacrament import (
    SacramentCreate,
    SacramentPage,
    SacramentRead,
    SacramentUpdate,
    normalize_sacrament_type,
)
from parish_registry.services import sacraments as svc
from parish_registry.services.errors import MemberNotFoundError

router = APIRouter(prefix="/sacraments", tags=["Sacraments"])
logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────────────────────
# OpenAPI "examples" for request body
# ─────────────────────────────────────────────────────────────────────────────
CREATE_EXAMPLES: Dict[str, Dict[str, Any]] = {
    "confirmation": {
        "summary": "Confirmation",
        "value": {
            "member_id": 1,
            "sacrament_type": "confirmation",
            "sacrament_date": "2025-08-08",
            "location": "Sacred Heart Kandara",
            "celebrant": "Bishop James Wainaina",
            "godparent_1": "Anne Muthoni",
            "certificate_number": "CONF-118",
        },
    },
    "anointing": {
        "summary": "Anointing of the sick",
        "description": "`anointing` is accepted as an alias.",
        "value": {
            "member_id": 1,
            "sacrament_type": "anointing",
            "sacrament_date": "2025-09-14",
            "celebrant": "Fr. Peter Njoroge",
        },
    },
}


@router.post(
    "/",
    response_model=SacramentRead,
    status_code=201,
    openapi_extra={"requestBody": {"content": {"application/json": {"examples": CREATE_EXAMPLES}}}},
)
def create_sacrament(
    payload: SacramentCreate,
    db: Session = Depends(get_db),
    user=Depends(require_permission("sacraments:write")),
):
    logger.info(
        "create_sacrament received: type=%s member_id=%s date=%s",
        payload.sacrament_type.value,
        payload.member_id,
        payload.sacrament_date,
    )
    try:
        return svc.create_sacrament(db, payload, recorded_by=acting_user_id(user))
    except MemberNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/", response_model=SacramentPage)
def list_sacraments(
    sacrament_type: Optional[str] = None,
    member_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    stype = None
    if sacrament_type:
        try:
            stype = SacramentType(normalize_sacrament_type(sacrament_type))
        except ValueError:
            raise HTTPException(status_code=422, detail=f"Unknown sacrament type: {sacrament_type}")

    total, items = svc.list_sacraments(
        db,
        sacrament_type=stype,
        member_id=member_id,
        date_from=date_from,
        date_to=date_to,
        search=search,
        skip=skip,
        limit=limit,
    )
    return SacramentPage(total=total, items=[SacramentRead.model_validate(s) for s in items])


@router.get("/statistics")
def sacrament_statistics(db: Session = Depends(get_db)):
    return svc.sacrament_statistics(db)


@router.get("/{sacrament_id}", response_model=SacramentRead)
def get_sacrament(sacrament_id: int, db: Session = Depends(get_db)):
    sac = svc.get_sacrament(db, sacrament_id)
    if not sac:
        raise HTTPException(status_code=404, detail="Sacrament not found")
    return sac


@router.patch(
    "/{sacrament_id}",
    response_model=SacramentRead,
    dependencies=[Depends(require_permission("sacraments:write"))],
)
def update_sacrament(sacrament_id: int, payload: SacramentUpdate, db: Session = Depends(get_db)):
    patch = payload.model_dump(exclude_unset=True)
    # type and date are required columns
    for key in ("sacrament_type", "sacrament_date", "member_id"):
        if key in patch and patch[key] is None:
            patch.pop(key)
    logger.info("update_sacrament id=%s fields=%s", sacrament_id, list(patch))

    try:
        sac = svc.update_sacrament(db, sacrament_id, patch)
    except MemberNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    if not sac:
        raise HTTPException(status_code=404, detail="Sacrament not found")
    return sac


# 204 must have no body, so return a bare Response
@router.delete(
    "/{sacrament_id}",
    status_code=204,
    response_class=Response,
    dependencies=[Depends(require_permission("sacraments:write"))],
)
def delete_sacrament(sacrament_id: int, db: Session = Depends(get_db)) -> Response:
    if not svc.delete_sacrament(db, sacrament_id):
        raise HTTPException(status_code=404, detail="Sacrament not found")
    return Response(status_code=204)
