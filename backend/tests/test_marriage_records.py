# backend/tests/test_marriage_records.py
from __future__ import annotations

from datetime import date

from sqlalchemy import func, select

from parish_registry.models import (
    DetailedRecordKind,
    MarriageRecord,
    MatrimonyStatus,
    Member,
    Sacrament,
    SacramentType,
)
from parish_registry.services import sacramental_records


def _count(db, model) -> int:
    return db.execute(select(func.count()).select_from(model)).scalar_one()


def test_marriage_with_both_spouses_marks_both_married(client, db, make_member, marriage_payload):
    husband = make_member(first_name="John", last_name="Mwangi", gender="Male")
    wife = make_member(first_name="Jane", last_name="Akinyi")

    r = client.post(
        "/sacramental-records/marriage",
        json=marriage_payload(husband_id=husband["id"], wife_id=wife["id"]),
    )
    assert r.status_code == 200, r.text
    record = r.json()["record"]
    assert record["record_number"].startswith(f"MAR-{date.today().year}-")
    assert record["parish_priest_id"] is None

    sac = db.get(Sacrament, record["sacrament_id"])
    assert sac.sacrament_type == SacramentType.marriage
    assert sac.member_id == husband["id"]
    assert sac.celebrant == "Fr. Peter Njoroge"
    assert sac.witness_1 == "David Kariuki"
    assert sac.witness_2 == "Esther Nyambura"
    assert sac.detailed_record_type == DetailedRecordKind.marriage_record
    assert sac.detailed_record_id == record["id"]

    assert db.get(Member, husband["id"]).matrimony_status == MatrimonyStatus.married
    assert db.get(Member, wife["id"]).matrimony_status == MatrimonyStatus.married


def test_marriage_with_husband_only(client, db, make_member, marriage_payload):
    husband = make_member(first_name="John", last_name="Mwangi", gender="Male")
    bystander = make_member(first_name="Other", last_name="Person")

    r = client.post("/sacramental-records/marriage", json=marriage_payload(husband_id=husband["id"]))
    assert r.status_code == 200, r.text

    sacraments = db.execute(select(Sacrament)).scalars().all()
    assert len(sacraments) == 1
    assert sacraments[0].member_id == husband["id"]
    assert _count(db, MarriageRecord) == 1
    assert db.get(Member, husband["id"]).matrimony_status == MatrimonyStatus.married
    assert db.get(Member, bystander["id"]).matrimony_status == MatrimonyStatus.single


def test_marriage_with_wife_only_attributes_sacrament_to_wife(client, db, make_member, marriage_payload):
    wife = make_member()
    r = client.post("/sacramental-records/marriage", json=marriage_payload(wife_id=wife["id"]))
    assert r.status_code == 200, r.text
    sac = db.get(Sacrament, r.json()["record"]["sacrament_id"])
    assert sac.member_id == wife["id"]


def test_marriage_between_non_members(client, db, marriage_payload):
    r = client.post("/sacramental-records/marriage", json=marriage_payload())
    assert r.status_code == 200, r.text
    sac = db.get(Sacrament, r.json()["record"]["sacrament_id"])
    assert sac.member_id is None


def test_unknown_spouse_id_is_422(client, db, marriage_payload):
    r = client.post("/sacramental-records/marriage", json=marriage_payload(husband_id=9999))
    assert r.status_code == 422
    assert _count(db, Sacrament) == 0
    assert _count(db, MarriageRecord) == 0


def test_explicit_record_number_must_be_unique(client, marriage_payload):
    r = client.post("/sacramental-records/marriage", json=marriage_payload(record_number="MAR-OLD-17"))
    assert r.status_code == 200, r.text
    assert r.json()["record"]["record_number"] == "MAR-OLD-17"

    r = client.post("/sacramental-records/marriage", json=marriage_payload(record_number="MAR-OLD-17"))
    assert r.status_code == 422


def test_missing_required_name_is_422(client, marriage_payload):
    payload = marriage_payload()
    payload.pop("wife_mother_name")
    r = client.post("/sacramental-records/marriage", json=payload)
    assert r.status_code == 422


def test_failure_rolls_back_marriage(client, db, make_member, marriage_payload, monkeypatch):
    husband = make_member(gender="Male")

    def boom(*args, **kwargs):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(sacramental_records, "_mark_married", boom)

    r = client.post("/sacramental-records/marriage", json=marriage_payload(husband_id=husband["id"]))
    assert r.status_code == 500
    assert r.json() == {"success": False, "message": "Failed to create marriage record: connection lost"}
    assert _count(db, Sacrament) == 0
    assert _count(db, MarriageRecord) == 0
    assert db.get(Member, husband["id"]).matrimony_status == MatrimonyStatus.single


def test_get_marriage_for_member_by_either_spouse(client, make_member, marriage_payload):
    husband = make_member(gender="Male")
    wife = make_member()
    client.post(
        "/sacramental-records/marriage",
        json=marriage_payload(husband_id=husband["id"], wife_id=wife["id"]),
    )

    for mid in (husband["id"], wife["id"]):
        r = client.get("/sacramental-records/marriage", params={"member_id": mid})
        assert r.status_code == 200, r.text
        assert r.json()["record"]["sacrament"]["sacrament_type"] == "marriage"

    r = client.get("/sacramental-records/marriage", params={"member_id": 31337})
    assert r.status_code == 404


def test_update_syncs_sacrament_and_links_new_spouse(client, db, make_member, marriage_payload):
    wife = make_member()
    record = client.post("/sacramental-records/marriage", json=marriage_payload()).json()["record"]

    r = client.patch(
        f"/sacramental-records/marriage-records/{record['id']}",
        json={"wife_id": wife["id"], "marriage_church": "Holy Family Basilica", "presence_of": "Fr. Simon Gitau"},
    )
    assert r.status_code == 200, r.text

    sac = db.get(Sacrament, record["sacrament_id"])
    assert sac.location == "Holy Family Basilica"
    assert sac.celebrant == "Fr. Simon Gitau"
    assert sac.member_id == wife["id"]
    assert db.get(Member, wife["id"]).matrimony_status == MatrimonyStatus.married


def test_update_cannot_clear_both_names(client, marriage_payload):
    record = client.post("/sacramental-records/marriage", json=marriage_payload()).json()["record"]
    r = client.patch(
        f"/sacramental-records/marriage-records/{record['id']}",
        json={"husband_name": None, "wife_name": None},
    )
    assert r.status_code == 422


def test_delete_removes_record_and_sacrament(client, db, marriage_payload):
    record = client.post("/sacramental-records/marriage", json=marriage_payload()).json()["record"]
    r = client.delete(f"/sacramental-records/marriage-records/{record['id']}")
    assert r.status_code == 204
    assert _count(db, MarriageRecord) == 0
    assert _count(db, Sacrament) == 0


def test_statistics_and_filters(client, marriage_payload):
    client.post("/sacramental-records/marriage", json=marriage_payload(marriage_date=str(date.today())))
    client.post(
        "/sacramental-records/marriage",
        json=marriage_payload(wife_name="Mercy Chebet", marriage_church="Holy Family Basilica"),
    )

    r = client.get("/sacramental-records/marriage-records", params={"wife_name": "chebet"})
    assert r.status_code == 200, r.text
    assert r.json()["total"] == 1

    stats = client.get("/sacramental-records/marriage-records/statistics").json()
    assert stats["total_marriages"] == 2
    assert stats["this_year"] >= 1
    assert {"church": "Holy Family Basilica", "count": 1} in stats["by_church"]


def test_certificate_backfills_placeholder_once(client, db, make_member):
    member = make_member(
        first_name="John",
        last_name="Mwangi",
        gender="Male",
        matrimony_status="married",
        marriage_date="2010-04-10",
        tribe="Kikuyu",
    )

    r = client.get(f"/sacramental-records/marriage/{member['id']}/certificate")
    assert r.status_code == 200, r.text
    cert = r.json()["certificate"]
    assert cert["placeholder_record_created"] is True
    record = cert["record"]
    assert record["husband_id"] == member["id"]
    assert record["husband_name"] == "John Mwangi"
    assert record["husband_tribe"] == "Kikuyu"
    assert record["husband_clan"] == "Not Specified"
    assert record["wife_name"] == "To Be Provided"
    assert record["marriage_date"] == "2010-04-10"
    assert record["presence_of"] == "Not Specified"

    r = client.get(f"/sacramental-records/marriage/{member['id']}/certificate")
    assert r.status_code == 200
    assert r.json()["certificate"]["placeholder_record_created"] is False
    assert r.json()["certificate"]["record"]["id"] == record["id"]
    assert _count(db, MarriageRecord) == 1
    assert _count(db, Sacrament) == 1


def test_placeholder_record_gets_paired_sacrament(client, db, make_member):
    member = make_member(
        first_name="John",
        last_name="Mwangi",
        gender="Male",
        matrimony_status="married",
        marriage_date="2010-04-10",
        marriage_location="Gaichanjiru",
    )
    record = client.get(f"/sacramental-records/marriage/{member['id']}/certificate").json()["certificate"]["record"]

    sac = db.get(Sacrament, record["sacrament_id"])
    assert sac is not None
    assert sac.member_id == member["id"]
    assert sac.sacrament_type == SacramentType.marriage
    assert sac.sacrament_date == date(2010, 4, 10)
    assert sac.location == "Gaichanjiru"
    assert sac.detailed_record_type == DetailedRecordKind.marriage_record
    assert sac.detailed_record_id == record["id"]

    summary = client.get(f"/members/{member['id']}/sacrament-summary").json()
    assert summary["marriage_date"] == "2010-04-10"
    assert "marriage" in summary["sacraments_received"]


def test_certificate_for_female_member_fills_wife_side(client, make_member):
    member = make_member(first_name="Jane", last_name="Akinyi", matrimony_status="married")
    cert = client.get(f"/sacramental-records/marriage/{member['id']}/certificate").json()["certificate"]
    assert cert["record"]["wife_id"] == member["id"]
    assert cert["record"]["wife_name"] == "Jane Akinyi"
    assert cert["record"]["husband_name"] == "To Be Provided"


def test_certificate_for_unmarried_member_is_404(client, make_member):
    member = make_member()
    r = client.get(f"/sacramental-records/marriage/{member['id']}/certificate")
    assert r.status_code == 404
    assert r.json()["success"] is False
