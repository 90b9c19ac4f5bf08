# tests/test_smoke_endpoints.py
import csv
import io
from datetime import date


def test_health_and_version(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["db"] == {"status": "ok", "driver": "sqlite"}
    assert body["time"]["tz"]

    r = client.get("/version")
    assert r.status_code == 200
    assert r.json()["app"] == "Parish Registry Backend"
    assert r.json()["db_driver"] == "sqlite"


def test_dashboard_counts(client, make_member, baptism_payload):
    member = make_member()
    make_member(first_name="Gone", membership_status="deceased")
    client.post(
        "/sacramental-records/baptism",
        json=baptism_payload(member["id"], baptism_date=str(date.today())),
    )
    client.post("/tithes/", json={"member_id": member["id"], "amount": 100, "date_given": str(date.today())})

    r = client.get("/reports/dashboard")
    assert r.status_code == 200, r.text
    d = r.json()
    assert d["members"] == {"total": 2, "active": 1, "families": 0}
    assert d["registers"] == {"baptism_records": 1, "marriage_records": 0}
    assert d["sacraments_this_year"]["baptism"] == 1
    assert d["tithes"]["this_year"] == 100.0
    assert d["recent_sacraments"][0]["member_id"] == member["id"]


def test_members_csv_export(client, make_member):
    make_member(first_name="Alice", last_name="Njeri, Jr.")
    make_member(first_name="Brian", last_name="Kimani", membership_status="inactive")

    r = client.get("/reports/members/export.csv")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert 'filename="members_export.csv"' in r.headers["content-disposition"]

    rows = list(csv.DictReader(io.StringIO(r.text)))
    assert [row["last_name"] for row in rows] == ["Kimani", "Njeri, Jr."]
    assert rows[0]["membership_status"] == "inactive"

    r = client.get("/reports/members/export.csv", params={"status": "active"})
    assert len(list(csv.DictReader(io.StringIO(r.text)))) == 1


def test_sacraments_csv_export(client, make_member, baptism_payload):
    member = make_member(first_name="Alice", last_name="Njeri")
    client.post("/sacramental-records/baptism", json=baptism_payload(member["id"]))

    r = client.get("/reports/sacraments/export.csv")
    assert r.status_code == 200
    rows = list(csv.DictReader(io.StringIO(r.text)))
    assert len(rows) == 1
    assert rows[0]["sacrament_type"] == "baptism"
    assert rows[0]["first_name"] == "Alice"
    assert rows[0]["detailed_record_type"] == "baptism_record"


def test_marriages_csv_export(client, marriage_payload):
    client.post("/sacramental-records/marriage", json=marriage_payload(marriage_date="2023-02-11"))
    client.post(
        "/sacramental-records/marriage",
        json=marriage_payload(husband_name="Paul Kariuki", wife_name="Ann Wairimu, Jr.", marriage_date="2024-08-03"),
    )

    r = client.get("/reports/marriages/export.csv")
    assert r.status_code == 200
    assert 'filename="marriages_export.csv"' in r.headers["content-disposition"]
    rows = list(csv.DictReader(io.StringIO(r.text)))
    assert [row["husband_name"] for row in rows] == ["John Mwangi", "Paul Kariuki"]
    assert rows[1]["wife_name"] == "Ann Wairimu, Jr."
    assert rows[0]["record_number"].startswith("MAR-")
    assert rows[0]["sacrament_id"] != ""

    r = client.get("/reports/marriages/export.csv", params={"q": "wairimu"})
    assert [row["husband_name"] for row in csv.DictReader(io.StringIO(r.text))] == ["Paul Kariuki"]
    r = client.get("/reports/marriages/export.csv", params={"date_to": "2023-12-31"})
    assert len(list(csv.DictReader(io.StringIO(r.text)))) == 1


def test_tithes_monthly(client, make_member):
    member = make_member()
    client.post("/tithes/", json={"member_id": member["id"], "amount": 100, "date_given": "2025-03-02"})
    client.post("/tithes/", json={"member_id": member["id"], "amount": 40, "date_given": "2025-03-20"})
    client.post("/tithes/", json={"member_id": member["id"], "amount": 10, "date_given": "2025-11-01"})

    r = client.get("/reports/tithes/monthly", params={"year": 2025})
    assert r.status_code == 200, r.text
    body = r.json()
    assert len(body["months"]) == 12
    assert body["months"][2] == {"month": 3, "total_amount": 140.0, "count": 2}
    assert body["months"][0]["total_amount"] == 0.0
    assert body["total_amount"] == 150.0
