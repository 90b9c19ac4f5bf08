# parish_registry/api/reports.py
from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy import extract, func, or_, select
from sqlalchemy.orm import Session

from parish_registry import config
from parish_registry.api.rbac import require_permission
from parish_registry.db import get_db
from parish_registry.models.baptism_record import BaptismRecord
from parish_registry.models.family import Family
from parish_registry.models.marriage_record import MarriageRecord
from parish_registry.models.member import Member, MembershipStatus
from parish_registry.models.sacrament import Sacrament, SacramentType
from parish_registry.models.tithe import Tithe
from parish_registry.services import tithes as tithes_svc
from parish_registry.services.query import like, to_float

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    dependencies=[Depends(require_permission("reports:read"))],
)


# ---------- helpers ----------
def _today() -> date:
    return datetime.now(ZoneInfo(config.local_tz())).date()


def esc(val) -> str:
    if val is None:
        return ""
    if isinstance(val, enum.Enum):
        val = val.value
    s = str(val)
    if any(c in s for c in [",", '"', "\n", "\r"]):
        s = '"' + s.replace('"', '""') + '"'
    return s


def _csv(rows, cols, filename: str) -> StreamingResponse:
    def row_iter():
        yield ",".join(cols) + "\n"
        for r in rows:
            yield ",".join(esc(v) for v in r) + "\n"

    return StreamingResponse(
        row_iter(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ---------- /reports/dashboard ----------
@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db)):
    """Headline counts for the parish office landing page."""
    today = _today()
    sac_year = extract("year", Sacrament.sacrament_date)
    tithe_year = extract("year", Tithe.date_given)
    tithe_month = extract("month", Tithe.date_given)
    tithe_sum = func.coalesce(func.sum(Tithe.amount), 0)

    sacraments_this_year = {t.value: 0 for t in SacramentType}
    for stype, cnt in db.execute(
        select(Sacrament.sacrament_type, func.count(Sacrament.id))
        .where(sac_year == today.year)
        .group_by(Sacrament.sacrament_type)
    ).all():
        sacraments_this_year[SacramentType(stype).value] = cnt

    recent = db.execute(
        select(Sacrament.id, Sacrament.sacrament_type, Sacrament.sacrament_date, Sacrament.member_id)
        .order_by(Sacrament.sacrament_date.desc(), Sacrament.id.desc())
        .limit(10)
    ).all()

    return {
        "as_of": str(today),
        "parish_name": config.parish_name(),
        "members": {
            "total": db.execute(select(func.count(Member.id))).scalar_one(),
            "active": db.execute(
                select(func.count(Member.id)).where(Member.membership_status == MembershipStatus.active)
            ).scalar_one(),
            "families": db.execute(select(func.count(Family.id))).scalar_one(),
        },
        "registers": {
            "baptism_records": db.execute(select(func.count(BaptismRecord.id))).scalar_one(),
            "marriage_records": db.execute(select(func.count(MarriageRecord.id))).scalar_one(),
        },
        "sacraments_this_year": sacraments_this_year,
        "tithes": {
            "this_month": to_float(
                db.execute(
                    select(tithe_sum).where(tithe_year == today.year, tithe_month == today.month)
                ).scalar_one()
            ),
            "this_year": to_float(db.execute(select(tithe_sum).where(tithe_year == today.year)).scalar_one()),
        },
        "recent_sacraments": [
            {
                "id": sid,
                "sacrament_type": SacramentType(stype).value,
                "sacrament_date": str(sdate),
                "member_id": mid,
            }
            for sid, stype, sdate, mid in recent
        ],
    }


# ---------- /reports/members/export.csv ----------
@router.get("/members/export.csv")
def members_export_csv(
    db: Session = Depends(get_db),
    q: Optional[str] = Query(None, description="Search first/last name"),
    status_: Optional[MembershipStatus] = Query(None, alias="status"),
    local_church: Optional[str] = None,
):
    conds = []
    if q:
        pattern = like(q)
        conds.append(or_(Member.first_name.ilike(pattern), Member.last_name.ilike(pattern)))
    if status_ is not None:
        conds.append(Member.membership_status == status_)
    if local_church:
        conds.append(Member.local_church == local_church)

    cols = [
        "id",
        "first_name",
        "middle_name",
        "last_name",
        "gender",
        "date_of_birth",
        "phone",
        "email",
        "local_church",
        "church_group",
        "membership_status",
        "matrimony_status",
        "baptism_date",
        "confirmation_date",
        "family_id",
    ]
    stmt = (
        select(*(getattr(Member, c) for c in cols))
        .where(*conds)
        .order_by(Member.last_name.asc(), Member.first_name.asc(), Member.id.asc())
    )
    return _csv(db.execute(stmt).all(), cols, "members_export.csv")


# ---------- /reports/sacraments/export.csv ----------
@router.get("/sacraments/export.csv")
def sacraments_export_csv(
    db: Session = Depends(get_db),
    sacrament_type: Optional[SacramentType] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
):
    conds = []
    if sacrament_type is not None:
        conds.append(Sacrament.sacrament_type == sacrament_type)
    if date_from is not None:
        conds.append(Sacrament.sacrament_date >= date_from)
    if date_to is not None:
        conds.append(Sacrament.sacrament_date <= date_to)

    stmt = (
        select(
            Sacrament.id,
            Sacrament.sacrament_type,
            Sacrament.sacrament_date,
            Sacrament.member_id,
            Member.first_name,
            Member.last_name,
            Sacrament.location,
            Sacrament.celebrant,
            Sacrament.certificate_number,
            Sacrament.detailed_record_type,
            Sacrament.detailed_record_id,
        )
        .join(Member, Member.id == Sacrament.member_id, isouter=True)
        .where(*conds)
        .order_by(Sacrament.sacrament_date.asc(), Sacrament.id.asc())
    )
    cols = [
        "id",
        "sacrament_type",
        "sacrament_date",
        "member_id",
        "first_name",
        "last_name",
        "location",
        "celebrant",
        "certificate_number",
        "detailed_record_type",
        "detailed_record_id",
    ]
    return _csv(db.execute(stmt).all(), cols, "sacraments_export.csv")


# ---------- /reports/marriages/export.csv ----------
@router.get("/marriages/export.csv")
def marriages_export_csv(
    db: Session = Depends(get_db),
    q: Optional[str] = Query(None, description="Search husband/wife name"),
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
):
    conds = []
    if q:
        pattern = like(q)
        conds.append(or_(MarriageRecord.husband_name.ilike(pattern), MarriageRecord.wife_name.ilike(pattern)))
    if date_from is not None:
        conds.append(MarriageRecord.marriage_date >= date_from)
    if date_to is not None:
        conds.append(MarriageRecord.marriage_date <= date_to)

    cols = [
        "record_number",
        "marriage_date",
        "marriage_church",
        "husband_id",
        "husband_name",
        "wife_id",
        "wife_name",
        "presence_of",
        "male_witness_name",
        "female_witness_name",
        "civil_marriage_certificate_number",
        "sacrament_id",
    ]
    stmt = (
        select(*(getattr(MarriageRecord, c) for c in cols))
        .where(*conds)
        .order_by(MarriageRecord.marriage_date.asc(), MarriageRecord.id.asc())
    )
    return _csv(db.execute(stmt).all(), cols, "marriages_export.csv")


# ---------- /reports/tithes/monthly ----------
@router.get("/tithes/monthly")
def tithes_monthly(db: Session = Depends(get_db), year: Optional[int] = Query(None, ge=1900, le=2999)):
    year = year or _today().year
    months = tithes_svc.monthly_totals(db, year)
    return {
        "year": year,
        "months": months,
        "total_amount": sum(m["total_amount"] for m in months),
    }
