# backend/tests/test_baptism_records.py
from __future__ import annotations

from datetime import date

from sqlalchemy import func, select

from parish_registry.models import BaptismRecord, DetailedRecordKind, Member, Sacrament, SacramentType
from parish_registry.services import sacramental_records


def _count(db, model) -> int:
    return db.execute(select(func.count()).select_from(model)).scalar_one()


def test_baptism_without_follow_ups(client, db, make_member, baptism_payload):
    member = make_member()

    r = client.post("/sacramental-records/baptism", json=baptism_payload(member["id"]))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    record = body["record"]
    assert record["member_id"] == member["id"]
    assert record["record_number"].startswith(f"BAP-{date.today().year}-")
    assert record["eucharist_sacrament_id"] is None
    assert record["confirmation_sacrament_id"] is None
    assert record["marriage_sacrament_id"] is None

    sacraments = db.execute(select(Sacrament)).scalars().all()
    assert len(sacraments) == 1
    sac = sacraments[0]
    assert sac.sacrament_type == SacramentType.baptism
    assert sac.member_id == member["id"]
    assert sac.celebrant == "Fr. Peter Njoroge"
    assert sac.godparent_1 == "Anne Muthoni"
    assert sac.location == "Sacred Heart Kandara"
    assert sac.recorded_by is None  # dev principal has no users row
    assert sac.detailed_record_type == DetailedRecordKind.baptism_record
    assert sac.detailed_record_id == record["id"]
    assert record["baptism_sacrament_id"] == sac.id

    assert _count(db, BaptismRecord) == 1
    assert db.get(Member, member["id"]).baptism_date == date(2024, 3, 10)


def test_baptism_with_all_follow_ups(client, db, make_member, baptism_payload):
    member = make_member()
    payload = baptism_payload(
        member["id"],
        eucharist_date="2032-05-01",
        eucharist_location="Kandara Outstation",
        confirmation_date="2036-08-20",
        confirmation_location="Sacred Heart Kandara",
        confirmation_number="CONF-77",
        confirmation_register_number="REG-4",
        marriage_date="2048-12-12",
        marriage_location="Holy Family Basilica",
        marriage_spouse="Paul Ndungu",
        marriage_number="M-9",
        marriage_register_number="MR-2",
        certificate_number="BC-1001",
        book_number="B1",
        page_number="17",
    )

    r = client.post("/sacramental-records/baptism", json=payload)
    assert r.status_code == 200, r.text
    record = r.json()["record"]

    by_type = {s.sacrament_type: s for s in db.execute(select(Sacrament)).scalars()}
    assert set(by_type) == {
        SacramentType.baptism,
        SacramentType.eucharist,
        SacramentType.confirmation,
        SacramentType.marriage,
    }
    assert record["eucharist_sacrament_id"] == by_type[SacramentType.eucharist].id
    assert record["confirmation_sacrament_id"] == by_type[SacramentType.confirmation].id
    assert record["marriage_sacrament_id"] == by_type[SacramentType.marriage].id

    assert by_type[SacramentType.baptism].certificate_number == "BC-1001"
    assert by_type[SacramentType.baptism].book_number == "B1"
    assert by_type[SacramentType.confirmation].certificate_number == "CONF-77"
    assert by_type[SacramentType.confirmation].book_number == "REG-4"
    assert by_type[SacramentType.marriage].certificate_number == "M-9"
    assert by_type[SacramentType.marriage].book_number == "MR-2"
    assert by_type[SacramentType.marriage].witness_1 == "Paul Ndungu"

    # only the baptism row points back at the register entry
    assert by_type[SacramentType.eucharist].detailed_record_type is None

    m = db.get(Member, member["id"])
    assert m.baptism_date == date(2024, 3, 10)
    assert m.confirmation_date == date(2036, 8, 20)


def test_follow_up_needs_both_date_and_location(client, db, make_member, baptism_payload):
    member = make_member()
    payload = baptism_payload(member["id"], eucharist_date="2032-05-01", confirmation_location="Kandara")

    r = client.post("/sacramental-records/baptism", json=payload)
    assert r.status_code == 200, r.text
    record = r.json()["record"]
    assert record["eucharist_sacrament_id"] is None
    assert record["confirmation_sacrament_id"] is None
    assert _count(db, Sacrament) == 1
    assert db.get(Member, member["id"]).confirmation_date is None


def test_blank_follow_up_fields_are_ignored(client, db, make_member, baptism_payload):
    member = make_member()
    payload = baptism_payload(member["id"], eucharist_date="", eucharist_location="  ")

    r = client.post("/sacramental-records/baptism", json=payload)
    assert r.status_code == 200, r.text
    assert _count(db, Sacrament) == 1


def test_existing_baptism_date_is_kept(client, db, make_member, baptism_payload):
    member = make_member(baptism_date="2001-01-01", confirmation_date="2015-05-05")
    payload = baptism_payload(
        member["id"], confirmation_date="2036-08-20", confirmation_location="Sacred Heart Kandara"
    )

    r = client.post("/sacramental-records/baptism", json=payload)
    assert r.status_code == 200, r.text

    m = db.get(Member, member["id"])
    assert m.baptism_date == date(2001, 1, 1)
    assert m.confirmation_date == date(2015, 5, 5)


def test_unknown_member_is_404_and_writes_nothing(client, db, baptism_payload):
    r = client.post("/sacramental-records/baptism", json=baptism_payload(9999))
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Member 9999 not found"}
    assert _count(db, Sacrament) == 0
    assert _count(db, BaptismRecord) == 0


def test_missing_required_field_is_422(client, make_member, baptism_payload):
    member = make_member()
    payload = baptism_payload(member["id"])
    payload.pop("sponsor")
    r = client.post("/sacramental-records/baptism", json=payload)
    assert r.status_code == 422


def test_failure_on_last_step_rolls_everything_back(client, db, make_member, baptism_payload, monkeypatch):
    member = make_member()
    payload = baptism_payload(member["id"], eucharist_date="2032-05-01", eucharist_location="Kandara")

    def boom(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(sacramental_records, "_fill_member_summary", boom)

    r = client.post("/sacramental-records/baptism", json=payload)
    assert r.status_code == 500
    assert r.json() == {"success": False, "message": "Failed to create baptism record: disk full"}

    assert _count(db, Sacrament) == 0
    assert _count(db, BaptismRecord) == 0
    assert db.get(Member, member["id"]).baptism_date is None


def test_get_baptism_for_member_includes_linked_sacraments(client, make_member, baptism_payload):
    member = make_member()
    payload = baptism_payload(member["id"], eucharist_date="2032-05-01", eucharist_location="Kandara")
    client.post("/sacramental-records/baptism", json=payload)

    r = client.get(f"/sacramental-records/baptism/{member['id']}")
    assert r.status_code == 200, r.text
    record = r.json()["record"]
    assert record["baptism_sacrament"]["sacrament_type"] == "baptism"
    assert record["eucharist_sacrament"]["sacrament_type"] == "eucharist"
    assert record["confirmation_sacrament"] is None

    r = client.get("/sacramental-records/baptism/424242")
    assert r.status_code == 404
    assert r.json()["success"] is False


def test_update_syncs_baptism_sacrament(client, db, make_member, baptism_payload):
    member = make_member()
    record = client.post("/sacramental-records/baptism", json=baptism_payload(member["id"])).json()["record"]

    r = client.patch(
        f"/sacramental-records/baptism-records/{record['id']}",
        json={"baptized_by": "Fr. Simon Gitau", "baptism_date": "2024-04-01", "sponsor": "Ruth Wairimu"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["baptized_by"] == "Fr. Simon Gitau"

    sac = db.get(Sacrament, record["baptism_sacrament_id"])
    assert sac.celebrant == "Fr. Simon Gitau"
    assert sac.sacrament_date == date(2024, 4, 1)
    assert sac.godparent_1 == "Ruth Wairimu"


def test_delete_removes_record_and_paired_sacrament(client, db, make_member, baptism_payload):
    member = make_member()
    record = client.post("/sacramental-records/baptism", json=baptism_payload(member["id"])).json()["record"]

    r = client.delete(f"/sacramental-records/baptism-records/{record['id']}")
    assert r.status_code == 204
    assert _count(db, BaptismRecord) == 0
    assert _count(db, Sacrament) == 0

    r = client.delete(f"/sacramental-records/baptism-records/{record['id']}")
    assert r.status_code == 404


def test_list_filters_and_statistics(client, make_member, baptism_payload):
    a = make_member(first_name="Alice", last_name="Njeri")
    b = make_member(first_name="Brian", last_name="Kimani", gender="Male")
    today = date.today()
    client.post("/sacramental-records/baptism", json=baptism_payload(a["id"], baptism_date=str(today)))
    client.post(
        "/sacramental-records/baptism",
        json=baptism_payload(b["id"], baptized_by="Fr. Simon Gitau", baptism_date="2020-02-02"),
    )

    r = client.get("/sacramental-records/baptism-records", params={"minister": "simon"})
    assert r.status_code == 200, r.text
    page = r.json()
    assert page["total"] == 1
    assert page["items"][0]["member_id"] == b["id"]

    r = client.get("/sacramental-records/baptism-records", params={"member_name": "alice"})
    assert r.json()["total"] == 1

    r = client.get("/sacramental-records/baptism-records/statistics")
    assert r.status_code == 200, r.text
    stats = r.json()
    assert stats["total_baptisms"] == 2
    assert stats["this_year"] == 1
    assert stats["this_month"] == 1
    assert {"minister": "Fr. Simon Gitau", "count": 1} in stats["by_minister"]


def test_baptism_certificate_payload(client, make_member, baptism_payload):
    member = make_member(first_name="Alice", last_name="Njeri")
    client.post("/sacramental-records/baptism", json=baptism_payload(member["id"]))

    r = client.get(f"/sacramental-records/baptism/{member['id']}/certificate")
    assert r.status_code == 200, r.text
    cert = r.json()["certificate"]
    assert cert["parish_name"] == "Sacred Heart Kandara Parish"
    assert cert["filename"].startswith("baptism-certificate-alice-njeri-")
    assert cert["member"]["full_name"] == "Alice Njeri"
    assert cert["record"]["member_id"] == member["id"]

    other = make_member()
    r = client.get(f"/sacramental-records/baptism/{other['id']}/certificate")
    assert r.status_code == 404
