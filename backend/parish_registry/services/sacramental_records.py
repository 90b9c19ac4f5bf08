# parish_registry/services/sacramental_records.py
"""
Baptism and marriage registers.

Registering a baptism or a marriage writes several rows at once: one generic
`Sacrament` fact per sacrament received, the detailed register entry, the
pointer from the Sacrament back to that entry, and summary fields on the
`Member`. Each public write function runs in a single transaction and either
commits all of it or rolls back all of it.
"""
from __future__ import annotations

import logging
import re
import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import extract, func, or_, select
from sqlalchemy.orm import Session

from parish_registry import config
from parish_registry.models.baptism_record import BaptismRecord
from parish_registry.models.marriage_record import MarriageRecord
from parish_registry.models.member import Gender, MatrimonyStatus, Member
from parish_registry.models.sacrament import DetailedRecordKind, Sacrament, SacramentType
from parish_registry.schemas.sacramental_records import BaptismRecordCreate, MarriageRecordCreate
from parish_registry.services.errors import (
    MemberNotFoundError,
    RecordNotFoundError,
    RegistryError,
    ValidationError,
)
from parish_registry.services.query import like
from parish_registry.services.record_numbers import next_record_number

logger = logging.getLogger(__name__)

PLACEHOLDER_NAME = "To Be Provided"
PLACEHOLDER_DETAIL = "Not Specified"

# Input keys that belong to the baptism Sacrament row, not to BaptismRecord
_BAPTISM_SACRAMENT_ONLY = {"certificate_number", "book_number", "page_number", "notes"}


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _new_sacrament(
    member_id: Optional[int],
    sacrament_type: SacramentType,
    sacrament_date: date,
    location: Optional[str],
    recorded_by: Optional[uuid.UUID],
    **extra: Any,
) -> Sacrament:
    return Sacrament(
        member_id=member_id,
        sacrament_type=sacrament_type,
        sacrament_date=sacrament_date,
        location=location,
        recorded_by=recorded_by,
        **extra,
    )


def _fill_member_summary(
    member: Member,
    baptism_date: date,
    confirmation_date: Optional[date],
) -> None:
    """Copy sacrament dates onto the member only where the member has none yet."""
    if member.baptism_date is None:
        member.baptism_date = baptism_date
    if member.confirmation_date is None and confirmation_date is not None:
        member.confirmation_date = confirmation_date


def _mark_married(db: Session, member_ids: Iterable[Optional[int]]) -> None:
    for mid in member_ids:
        if mid is None:
            continue
        member = db.get(Member, mid)
        if member is not None:
            member.matrimony_status = MatrimonyStatus.married


def _ensure_members_exist(db: Session, **refs: Optional[int]) -> None:
    for field, mid in refs.items():
        if mid is not None and db.get(Member, mid) is None:
            raise ValidationError(f"{field} {mid} does not reference an existing member")


def _apply_patch(record, patch: Dict[str, Any]) -> None:
    """setattr each patched field, skipping nulls aimed at required columns."""
    columns = record.__table__.columns
    for key, value in patch.items():
        if value is None and not columns[key].nullable:
            continue
        setattr(record, key, value)


def _slug(*parts: Optional[str]) -> str:
    text = "-".join(p for p in parts if p)
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


# ─────────────────────────────────────────────────────────────────────────────
# Baptism register
# ─────────────────────────────────────────────────────────────────────────────

def create_baptism_record(
    db: Session,
    payload: BaptismRecordCreate,
    recorded_by: Optional[uuid.UUID] = None,
    today: Optional[date] = None,
) -> BaptismRecord:
    """Register a baptism together with any later sacraments entered on the same form.

    Creates the baptism Sacrament, then eucharist / confirmation / marriage
    Sacraments for each follow-up whose date and location are both given,
    then the BaptismRecord linking all of them.
    """
    data = payload.model_dump()

    try:
        member = db.get(Member, payload.member_id)
        if member is None:
            raise MemberNotFoundError(payload.member_id)

        baptism = _new_sacrament(
            member.id,
            SacramentType.baptism,
            payload.baptism_date,
            payload.baptism_location,
            recorded_by,
            celebrant=payload.baptized_by,
            godparent_1=payload.sponsor,
            certificate_number=payload.certificate_number,
            book_number=payload.book_number,
            page_number=payload.page_number,
            notes=payload.notes,
        )
        db.add(baptism)

        eucharist = None
        if payload.eucharist_date and payload.eucharist_location:
            eucharist = _new_sacrament(
                member.id,
                SacramentType.eucharist,
                payload.eucharist_date,
                payload.eucharist_location,
                recorded_by,
            )
            db.add(eucharist)

        confirmation = None
        if payload.confirmation_date and payload.confirmation_location:
            confirmation = _new_sacrament(
                member.id,
                SacramentType.confirmation,
                payload.confirmation_date,
                payload.confirmation_location,
                recorded_by,
                certificate_number=payload.confirmation_number,
                book_number=payload.confirmation_register_number,
            )
            db.add(confirmation)

        marriage = None
        if payload.marriage_date and payload.marriage_location:
            # The register's "together with" name is kept in witness_1
            marriage = _new_sacrament(
                member.id,
                SacramentType.marriage,
                payload.marriage_date,
                payload.marriage_location,
                recorded_by,
                certificate_number=payload.marriage_number,
                book_number=payload.marriage_register_number,
                witness_1=payload.marriage_spouse,
            )
            db.add(marriage)

        db.flush()  # assign sacrament ids

        record_fields = {k: v for k, v in data.items() if k not in _BAPTISM_SACRAMENT_ONLY}
        record = BaptismRecord(
            **record_fields,
            record_number=next_record_number(db, BaptismRecord, today),
            baptism_sacrament_id=baptism.id,
            eucharist_sacrament_id=eucharist.id if eucharist else None,
            confirmation_sacrament_id=confirmation.id if confirmation else None,
            marriage_sacrament_id=marriage.id if marriage else None,
        )
        db.add(record)
        db.flush()

        baptism.link_detail(DetailedRecordKind.baptism_record, record.id)
        _fill_member_summary(member, payload.baptism_date, payload.confirmation_date)

        db.commit()
    except RegistryError:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception("baptism registration rolled back for member_id=%s", payload.member_id)
        raise

    db.refresh(record)
    logger.info(
        "baptism record %s created for member_id=%s (sacraments=%s)",
        record.record_number,
        record.member_id,
        record.sacrament_ids(),
    )
    return record


def get_baptism_record(db: Session, record_id: int) -> Optional[BaptismRecord]:
    return db.get(BaptismRecord, record_id)


def get_baptism_record_for_member(db: Session, member_id: int) -> Optional[BaptismRecord]:
    return (
        db.execute(
            select(BaptismRecord)
            .where(BaptismRecord.member_id == member_id)
            .order_by(BaptismRecord.id.asc())
        )
        .scalars()
        .first()
    )


def list_baptism_records(
    db: Session,
    member_name: Optional[str] = None,
    minister: Optional[str] = None,
    location: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    skip: int = 0,
    limit: int = 50,
) -> Tuple[int, List[BaptismRecord]]:
    conds = []
    if member_name:
        pattern = like(member_name)
        conds.append(or_(Member.first_name.ilike(pattern), Member.last_name.ilike(pattern)))
    if minister:
        conds.append(BaptismRecord.baptized_by.ilike(like(minister)))
    if location:
        conds.append(BaptismRecord.baptism_location.ilike(like(location)))
    if date_from is not None:
        conds.append(BaptismRecord.baptism_date >= date_from)
    if date_to is not None:
        conds.append(BaptismRecord.baptism_date <= date_to)

    base = select(BaptismRecord).join(Member, Member.id == BaptismRecord.member_id).where(*conds)
    total = db.execute(select(func.count()).select_from(base.subquery())).scalar_one()
    rows = (
        db.execute(
            base.order_by(BaptismRecord.baptism_date.desc(), BaptismRecord.id.desc())
            .offset(skip)
            .limit(limit)
        )
        .scalars()
        .all()
    )
    return total, list(rows)


def update_baptism_record(db: Session, record_id: int, patch: Dict[str, Any]) -> Optional[BaptismRecord]:
    """Apply `patch` to the record and mirror date/minister/place/sponsor onto its baptism Sacrament."""
    record = db.get(BaptismRecord, record_id)
    if record is None:
        return None

    try:
        _apply_patch(record, patch)

        sac = db.get(Sacrament, record.baptism_sacrament_id) if record.baptism_sacrament_id else None
        if sac is not None:
            sac.sacrament_date = record.baptism_date
            sac.celebrant = record.baptized_by
            sac.location = record.baptism_location
            sac.godparent_1 = record.sponsor

        db.commit()
    except Exception:
        db.rollback()
        logger.exception("baptism record %s update rolled back", record_id)
        raise

    db.refresh(record)
    return record


def delete_baptism_record(db: Session, record_id: int) -> bool:
    """Delete the record and its paired baptism Sacrament row."""
    record = db.get(BaptismRecord, record_id)
    if record is None:
        return False

    try:
        sac = db.get(Sacrament, record.baptism_sacrament_id) if record.baptism_sacrament_id else None
        db.delete(record)
        db.flush()
        if sac is not None:
            db.delete(sac)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("baptism record %s delete rolled back", record_id)
        raise

    logger.info("baptism record %s deleted", record_id)
    return True


def baptism_statistics(db: Session, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    year_col = extract("year", BaptismRecord.baptism_date)
    month_col = extract("month", BaptismRecord.baptism_date)

    total = db.execute(select(func.count(BaptismRecord.id))).scalar_one()
    this_year = db.execute(select(func.count(BaptismRecord.id)).where(year_col == today.year)).scalar_one()
    this_month = db.execute(
        select(func.count(BaptismRecord.id)).where(year_col == today.year, month_col == today.month)
    ).scalar_one()

    by_month_rows = db.execute(
        select(month_col.label("month"), func.count(BaptismRecord.id))
        .where(year_col == today.year)
        .group_by(month_col)
        .order_by(month_col)
    ).all()

    cnt = func.count(BaptismRecord.id)
    by_minister_rows = db.execute(
        select(BaptismRecord.baptized_by, cnt)
        .group_by(BaptismRecord.baptized_by)
        .order_by(cnt.desc())
        .limit(10)
    ).all()

    return {
        "total_baptisms": total,
        "this_year": this_year,
        "this_month": this_month,
        "by_month": [{"month": int(m), "count": c} for m, c in by_month_rows],
        "by_minister": [{"minister": name, "count": c} for name, c in by_minister_rows],
    }


# ─────────────────────────────────────────────────────────────────────────────
# Marriage register
# ─────────────────────────────────────────────────────────────────────────────

def validate_marriage_references(db: Session, payload: MarriageRecordCreate) -> None:
    """Checks that need the database but must run before anything is written."""
    _ensure_members_exist(db, husband_id=payload.husband_id, wife_id=payload.wife_id)
    if payload.record_number:
        taken = db.execute(
            select(MarriageRecord.id).where(MarriageRecord.record_number == payload.record_number)
        ).first()
        if taken:
            raise ValidationError(f"record_number {payload.record_number} is already in use")


def create_marriage_record(
    db: Session,
    payload: MarriageRecordCreate,
    parish_priest_id: Optional[uuid.UUID] = None,
    today: Optional[date] = None,
) -> MarriageRecord:
    """Register a marriage: one Sacrament row, the MarriageRecord, and spouse status updates.

    The Sacrament is attributed to the husband when he is a member, otherwise
    to the wife, otherwise to nobody.
    """
    validate_marriage_references(db, payload)
    data = payload.model_dump()

    try:
        attributed_to = payload.husband_id if payload.husband_id is not None else payload.wife_id
        sacrament = _new_sacrament(
            attributed_to,
            SacramentType.marriage,
            payload.marriage_date,
            payload.marriage_church,
            parish_priest_id,
            celebrant=payload.presence_of,
            witness_1=payload.male_witness_name,
            witness_2=payload.female_witness_name,
            certificate_number=payload.civil_marriage_certificate_number,
            notes=payload.other_documents,
        )
        db.add(sacrament)
        db.flush()

        if not data.get("record_number"):
            data["record_number"] = next_record_number(db, MarriageRecord, today)

        record = MarriageRecord(**data, sacrament_id=sacrament.id, parish_priest_id=parish_priest_id)
        db.add(record)
        db.flush()

        sacrament.link_detail(DetailedRecordKind.marriage_record, record.id)
        _mark_married(db, (payload.husband_id, payload.wife_id))

        db.commit()
    except RegistryError:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception(
            "marriage registration rolled back (husband_id=%s wife_id=%s)",
            payload.husband_id,
            payload.wife_id,
        )
        raise

    db.refresh(record)
    logger.info(
        "marriage record %s created (husband_id=%s wife_id=%s sacrament_id=%s)",
        record.record_number,
        record.husband_id,
        record.wife_id,
        record.sacrament_id,
    )
    return record


def get_marriage_record(db: Session, record_id: int) -> Optional[MarriageRecord]:
    return db.get(MarriageRecord, record_id)


def get_marriage_record_for_member(db: Session, member_id: int) -> Optional[MarriageRecord]:
    return (
        db.execute(
            select(MarriageRecord)
            .where(or_(MarriageRecord.husband_id == member_id, MarriageRecord.wife_id == member_id))
            .order_by(MarriageRecord.id.asc())
        )
        .scalars()
        .first()
    )


def list_marriage_records(
    db: Session,
    husband_name: Optional[str] = None,
    wife_name: Optional[str] = None,
    officiant: Optional[str] = None,
    church: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    skip: int = 0,
    limit: int = 50,
) -> Tuple[int, List[MarriageRecord]]:
    conds = []
    if husband_name:
        conds.append(MarriageRecord.husband_name.ilike(like(husband_name)))
    if wife_name:
        conds.append(MarriageRecord.wife_name.ilike(like(wife_name)))
    if officiant:
        conds.append(MarriageRecord.presence_of.ilike(like(officiant)))
    if church:
        conds.append(MarriageRecord.marriage_church.ilike(like(church)))
    if date_from is not None:
        conds.append(MarriageRecord.marriage_date >= date_from)
    if date_to is not None:
        conds.append(MarriageRecord.marriage_date <= date_to)

    total = db.execute(select(func.count(MarriageRecord.id)).where(*conds)).scalar_one()
    rows = (
        db.execute(
            select(MarriageRecord)
            .where(*conds)
            .order_by(MarriageRecord.marriage_date.desc(), MarriageRecord.id.desc())
            .offset(skip)
            .limit(limit)
        )
        .scalars()
        .all()
    )
    return total, list(rows)


def update_marriage_record(db: Session, record_id: int, patch: Dict[str, Any]) -> Optional[MarriageRecord]:
    """Apply `patch` and mirror ceremony fields onto the linked Sacrament.

    Spouses newly linked by id are marked married; unlinking a spouse does
    not change their status.
    """
    record = db.get(MarriageRecord, record_id)
    if record is None:
        return None

    _ensure_members_exist(db, husband_id=patch.get("husband_id"), wife_id=patch.get("wife_id"))
    husband_name = patch.get("husband_name", record.husband_name)
    wife_name = patch.get("wife_name", record.wife_name)
    if not husband_name and not wife_name:
        raise ValidationError("a marriage record needs at least one spouse name")

    newly_linked = [
        patch[k] for k in ("husband_id", "wife_id")
        if patch.get(k) is not None and patch[k] != getattr(record, k)
    ]

    try:
        _apply_patch(record, patch)

        sac = db.get(Sacrament, record.sacrament_id) if record.sacrament_id else None
        if sac is not None:
            sac.member_id = record.husband_id if record.husband_id is not None else record.wife_id
            sac.sacrament_date = record.marriage_date
            sac.location = record.marriage_church
            sac.celebrant = record.presence_of
            sac.witness_1 = record.male_witness_name
            sac.witness_2 = record.female_witness_name
            sac.certificate_number = record.civil_marriage_certificate_number

        _mark_married(db, newly_linked)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("marriage record %s update rolled back", record_id)
        raise

    db.refresh(record)
    return record


def delete_marriage_record(db: Session, record_id: int) -> bool:
    """Delete the record and its paired marriage Sacrament row."""
    record = db.get(MarriageRecord, record_id)
    if record is None:
        return False

    try:
        sac = db.get(Sacrament, record.sacrament_id) if record.sacrament_id else None
        db.delete(record)
        db.flush()
        if sac is not None:
            db.delete(sac)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("marriage record %s delete rolled back", record_id)
        raise

    logger.info("marriage record %s deleted", record_id)
    return True


def marriage_statistics(db: Session, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    year_col = extract("year", MarriageRecord.marriage_date)
    month_col = extract("month", MarriageRecord.marriage_date)
    cnt = func.count(MarriageRecord.id)

    total = db.execute(select(cnt)).scalar_one()
    this_year = db.execute(select(cnt).where(year_col == today.year)).scalar_one()
    this_month = db.execute(select(cnt).where(year_col == today.year, month_col == today.month)).scalar_one()

    by_month_rows = db.execute(
        select(month_col, cnt).where(year_col == today.year).group_by(month_col).order_by(month_col)
    ).all()
    by_officiant_rows = db.execute(
        select(MarriageRecord.presence_of, cnt)
        .group_by(MarriageRecord.presence_of)
        .order_by(cnt.desc())
        .limit(10)
    ).all()
    by_church_rows = db.execute(
        select(MarriageRecord.marriage_church, cnt)
        .group_by(MarriageRecord.marriage_church)
        .order_by(cnt.desc())
        .limit(10)
    ).all()

    return {
        "total_marriages": total,
        "this_year": this_year,
        "this_month": this_month,
        "by_month": [{"month": int(m), "count": c} for m, c in by_month_rows],
        "by_officiant": [{"officiant": name, "count": c} for name, c in by_officiant_rows],
        "by_church": [{"church": name, "count": c} for name, c in by_church_rows],
    }


# ─────────────────────────────────────────────────────────────────────────────
# Certificates
# ─────────────────────────────────────────────────────────────────────────────

def ensure_marriage_record_for_member(
    db: Session,
    member_id: int,
    parish_priest_id: Optional[uuid.UUID] = None,
    today: Optional[date] = None,
) -> Tuple[MarriageRecord, bool]:
    """Return the member's marriage record, building a placeholder one if needed.

    Members flagged married without a register entry (imported data) get a
    record assembled from their own row, with placeholder text for what the
    member row cannot supply, plus the paired marriage Sacrament attributed
    to the member. Returns ``(record, created)``; an existing
    record is always returned as-is so repeated calls never duplicate it.
    """
    existing = get_marriage_record_for_member(db, member_id)
    if existing is not None:
        return existing, False

    member = db.get(Member, member_id)
    if member is None:
        raise MemberNotFoundError(member_id)
    if member.matrimony_status != MatrimonyStatus.married:
        raise RecordNotFoundError(f"No marriage record found for member {member_id}")

    own_side = {
        "name": member.full_name,
        "father_name": PLACEHOLDER_NAME,
        "mother_name": PLACEHOLDER_NAME,
        "tribe": member.tribe or PLACEHOLDER_DETAIL,
        "clan": member.clan or PLACEHOLDER_DETAIL,
        "domicile": member.residence or PLACEHOLDER_DETAIL,
        "baptism_date": member.baptism_date,
    }
    other_side = {"name": PLACEHOLDER_NAME, "father_name": PLACEHOLDER_NAME, "mother_name": PLACEHOLDER_NAME}
    husband_side, wife_side = (own_side, other_side) if member.gender == Gender.male else (other_side, own_side)

    fields: Dict[str, Any] = {f"husband_{k}": v for k, v in husband_side.items()}
    fields.update({f"wife_{k}": v for k, v in wife_side.items()})
    if member.gender == Gender.male:
        fields["husband_id"] = member.id
    else:
        fields["wife_id"] = member.id

    marriage_date = member.marriage_date or (today or date.today())
    marriage_church = member.marriage_location or member.local_church or PLACEHOLDER_DETAIL

    try:
        sacrament = _new_sacrament(
            member.id,
            SacramentType.marriage,
            marriage_date,
            marriage_church,
            parish_priest_id,
            celebrant=PLACEHOLDER_DETAIL,
            witness_1=PLACEHOLDER_DETAIL,
            witness_2=PLACEHOLDER_DETAIL,
        )
        db.add(sacrament)
        db.flush()

        record = MarriageRecord(
            **fields,
            record_number=next_record_number(db, MarriageRecord, today),
            marriage_date=marriage_date,
            marriage_church=marriage_church,
            presence_of=PLACEHOLDER_DETAIL,
            male_witness_name=PLACEHOLDER_DETAIL,
            female_witness_name=PLACEHOLDER_DETAIL,
            sacrament_id=sacrament.id,
            parish_priest_id=parish_priest_id,
        )
        db.add(record)
        db.flush()

        sacrament.link_detail(DetailedRecordKind.marriage_record, record.id)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("placeholder marriage record for member_id=%s rolled back", member_id)
        raise

    db.refresh(record)
    logger.warning(
        "built placeholder marriage record %s for member_id=%s from member data",
        record.record_number,
        member_id,
    )
    return record, True


def _certificate(kind: str, names: Iterable[Optional[str]], today: date) -> Dict[str, Any]:
    return {
        "parish_name": config.parish_name(),
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "filename": f"{kind}-certificate-{_slug(*names)}-{today.isoformat()}.pdf",
    }


def baptism_certificate(db: Session, member_id: int, today: Optional[date] = None) -> Dict[str, Any]:
    member = db.get(Member, member_id)
    if member is None:
        raise MemberNotFoundError(member_id)
    record = get_baptism_record_for_member(db, member_id)
    if record is None:
        raise RecordNotFoundError(f"Baptism record not found for member {member_id}")

    out = _certificate("baptism", (member.first_name, member.last_name), today or date.today())
    out.update({"record": record, "member": member})
    return out


def marriage_certificate(
    db: Session,
    member_id: int,
    parish_priest_id: Optional[uuid.UUID] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    record, created = ensure_marriage_record_for_member(db, member_id, parish_priest_id, today)
    out = _certificate("marriage", (record.husband_name, record.wife_name), today or date.today())
    out.update({"record": record, "placeholder_record_created": created})
    return out
