# backend/tests/test_members.py
from __future__ import annotations

from sqlalchemy import func, select

from parish_registry.models import BaptismRecord, Family, MarriageRecord, Sacrament, Tithe


def test_member_crud(client, make_member):
    member = make_member(first_name="Grace", middle_name="Wanjiru", last_name="Wambui", id_number="12345678")
    assert member["full_name"] == "Grace Wanjiru Wambui"
    assert member["membership_status"] == "active"
    assert member["matrimony_status"] == "single"

    r = client.patch(f"/members/{member['id']}", json={"phone": "0712000000", "church_group": "CWA"})
    assert r.status_code == 200, r.text
    assert r.json()["phone"] == "0712000000"

    r = client.get(f"/members/{member['id']}")
    assert r.status_code == 200
    assert r.json()["church_group"] == "CWA"

    assert client.get("/members/999999").status_code == 404


def test_duplicate_id_number_is_422(client, make_member):
    make_member(id_number="22223333")
    r = client.post("/members/", json={"first_name": "X", "last_name": "Y", "id_number": "22223333"})
    assert r.status_code == 422


def test_unknown_family_is_422(client):
    r = client.post("/members/", json={"first_name": "X", "last_name": "Y", "family_id": 404})
    assert r.status_code == 422


def test_search_and_filters(client, make_member):
    make_member(first_name="Alice", last_name="Njeri", local_church="Kandara")
    make_member(first_name="Brian", last_name="Kimani", gender="Male", local_church="Gaichanjiru")

    page = client.get("/members/", params={"q": "kim"}).json()
    assert page["total"] == 1
    assert page["items"][0]["first_name"] == "Brian"

    assert client.get("/members/", params={"gender": "Female"}).json()["total"] == 1
    assert client.get("/members/", params={"local_church": "Kandara"}).json()["total"] == 1
    assert client.get("/members/").json()["total"] == 2


def test_status_change(client, make_member):
    member = make_member()
    r = client.patch(f"/members/{member['id']}/status", json={"membership_status": "transferred"})
    assert r.status_code == 200, r.text
    assert r.json()["membership_status"] == "transferred"

    r = client.patch(f"/members/{member['id']}/status", json={"membership_status": "lapsed"})
    assert r.status_code == 422
    assert client.patch("/members/9999/status", json={"membership_status": "active"}).status_code == 404


def test_sacraments_and_derived_summary(client, make_member, baptism_payload):
    member = make_member()
    client.post(
        "/sacramental-records/baptism",
        json=baptism_payload(
            member["id"],
            eucharist_date="2032-05-01",
            eucharist_location="Kandara",
            confirmation_date="2036-08-20",
            confirmation_location="Kandara",
        ),
    )

    r = client.get(f"/members/{member['id']}/sacraments")
    assert r.status_code == 200, r.text
    assert [s["sacrament_type"] for s in r.json()] == ["baptism", "eucharist", "confirmation"]

    r = client.get(f"/members/{member['id']}/sacrament-summary")
    assert r.status_code == 200, r.text
    summary = r.json()
    assert summary["baptism_date"] == "2024-03-10"
    assert summary["eucharist_date"] == "2032-05-01"
    assert summary["confirmation_date"] == "2036-08-20"
    assert summary["marriage_date"] is None
    assert summary["sacraments_received"] == ["baptism", "confirmation", "eucharist"]


def test_delete_member_removes_dependants(client, db, make_member, baptism_payload, marriage_payload):
    member = make_member(gender="Male")
    spouse = make_member()
    client.post("/sacramental-records/baptism", json=baptism_payload(member["id"]))
    marriage = client.post(
        "/sacramental-records/marriage",
        json=marriage_payload(husband_id=member["id"], wife_id=spouse["id"]),
    ).json()["record"]
    client.post("/tithes/", json={"member_id": member["id"], "amount": "250.00", "date_given": "2025-01-05"})
    family = client.post("/families/", json={"family_name": "Mwangi", "head_of_family_id": member["id"]}).json()

    r = client.delete(f"/members/{member['id']}")
    assert r.status_code == 204

    count = lambda model: db.execute(select(func.count()).select_from(model)).scalar_one()  # noqa: E731
    assert count(BaptismRecord) == 0
    assert count(Tithe) == 0
    assert count(Sacrament) == 0

    rec = db.get(MarriageRecord, marriage["id"])
    assert rec.husband_id is None
    assert rec.wife_id == spouse["id"]
    assert rec.sacrament_id is None
    assert db.get(Family, family["id"]).head_of_family_id is None

    assert client.get(f"/members/{member['id']}").status_code == 404
    assert client.delete(f"/members/{member['id']}").status_code == 404


def test_statistics(client, make_member):
    make_member(gender="Female", local_church="Kandara", baptism_date="2000-01-01")
    make_member(gender="Male", local_church="Kandara", matrimony_status="married")

    stats = client.get("/members/statistics").json()
    assert stats["total_members"] == 2
    assert stats["by_gender"] == {"Male": 1, "Female": 1}
    assert stats["by_matrimony_status"]["married"] == 1
    assert stats["by_status"]["active"] == 2
    assert stats["baptized"] == 1
    assert stats["by_local_church"] == [{"church": "Kandara", "count": 2}]
