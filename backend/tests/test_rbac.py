# backend/tests/test_rbac.py
from __future__ import annotations

import pytest

CLERK_KEY = "clerk-key-0123456789abcdef"
VIEWER_KEY = "viewer-key-0123456789abcdef"


@pytest.fixture
def users(client):
    """A clerk who may edit members and tithes, and a viewer who may only read reports."""
    clerk_role = client.post(
        "/rbac/roles", json={"name": "clerk", "permissions": ["members:*", "tithes:write", "records:write"]}
    )
    assert clerk_role.status_code == 201, clerk_role.text
    viewer_role = client.post("/rbac/roles", json={"name": "viewer", "permissions": ["reports:read"]})
    assert viewer_role.status_code == 201, viewer_role.text

    clerk = client.post(
        "/rbac/users",
        json={"email": "Clerk@Parish.local", "role_ids": [clerk_role.json()["id"]], "api_key_plain": CLERK_KEY},
    )
    assert clerk.status_code == 201, clerk.text
    viewer = client.post(
        "/rbac/users",
        json={"email": "viewer@parish.local", "role_ids": [viewer_role.json()["id"]], "api_key_plain": VIEWER_KEY},
    )
    assert viewer.status_code == 201, viewer.text
    return {"clerk": clerk.json(), "viewer": viewer.json()}


def test_dev_mode_principal(client):
    r = client.get("/rbac/me")
    assert r.status_code == 200
    assert r.json() == {
        "id": None,
        "email": "dev@local",
        "display_name": "Dev",
        "permissions": ["*"],
        "enforced": False,
    }


def test_user_creation_returns_key_once(client, users):
    assert users["clerk"]["email"] == "clerk@parish.local"
    assert users["clerk"]["api_key"] == CLERK_KEY

    roles = client.get("/rbac/roles").json()
    assert [r["name"] for r in roles] == ["clerk", "viewer"]
    assert roles[0]["permissions"] == ["members:*", "records:write", "tithes:write"]


def test_duplicate_role_and_email_conflict(client, users):
    assert client.post("/rbac/roles", json={"name": "clerk"}).status_code == 409
    r = client.post("/rbac/users", json={"email": "clerk@parish.local", "api_key_plain": "x" * 20})
    assert r.status_code == 409


def test_enforced_mode_checks_keys_and_permissions(client, users, monkeypatch):
    monkeypatch.setenv("RBAC_ENFORCE", "true")
    member = {"first_name": "Grace", "last_name": "Wambui"}

    assert client.post("/members/", json=member).status_code == 401
    assert client.post("/members/", json=member, headers={"X-API-Key": "nope"}).status_code == 401
    assert client.post("/members/", json=member, headers={"X-API-Key": VIEWER_KEY}).status_code == 403

    r = client.post("/members/", json=member, headers={"X-API-Key": CLERK_KEY})
    assert r.status_code == 201, r.text

    # reports are guarded as a whole
    assert client.get("/reports/dashboard", headers={"X-API-Key": CLERK_KEY}).status_code == 403
    assert client.get("/reports/dashboard", headers={"X-API-Key": VIEWER_KEY}).status_code == 200

    me = client.get("/rbac/me", headers={"X-API-Key": VIEWER_KEY}).json()
    assert me["enforced"] is True
    assert me["id"] == users["viewer"]["id"]
    assert me["permissions"] == ["reports:read"]


def test_enforced_mode_records_acting_user(client, users, monkeypatch, baptism_payload):
    monkeypatch.setenv("RBAC_ENFORCE", "true")
    headers = {"X-API-Key": CLERK_KEY}
    member = client.post("/members/", json={"first_name": "G", "last_name": "W"}, headers=headers).json()

    tithe = client.post(
        "/tithes/", json={"member_id": member["id"], "amount": 10, "date_given": "2025-01-01"}, headers=headers
    )
    assert tithe.status_code == 201, tithe.text
    assert tithe.json()["recorded_by"] == users["clerk"]["id"]

    r = client.post("/sacramental-records/baptism", json=baptism_payload(member["id"]), headers=headers)
    assert r.status_code == 200, r.text
    sac = client.get(f"/sacraments/{r.json()['record']['baptism_sacrament_id']}").json()
    assert sac["recorded_by"] == users["clerk"]["id"]


def test_wildcard_matching():
    from parish_registry.api.rbac import _has_permission

    assert _has_permission(["*"], "rbac:manage")
    assert _has_permission(["members:*"], "members:write")
    assert _has_permission(["members:*"], "members")
    assert not _has_permission(["members:*"], "membership:write")
    assert not _has_permission(["tithes:read"], "tithes:write")


def test_marriage_certificate_backfill_needs_records_write(client, users, monkeypatch, db):
    from sqlalchemy import func, select

    from parish_registry.models import MarriageRecord

    member = client.post(
        "/members/", json={"first_name": "John", "last_name": "Mwangi", "matrimony_status": "married"}
    ).json()
    monkeypatch.setenv("RBAC_ENFORCE", "true")
    url = f"/sacramental-records/marriage/{member['id']}/certificate"

    assert client.get(url).status_code == 401
    assert client.get(url, headers={"X-API-Key": VIEWER_KEY}).status_code == 403
    assert db.execute(select(func.count()).select_from(MarriageRecord)).scalar_one() == 0

    r = client.get(url, headers={"X-API-Key": CLERK_KEY})
    assert r.status_code == 200, r.text
    assert r.json()["certificate"]["placeholder_record_created"] is True
    assert r.json()["certificate"]["record"]["parish_priest_id"] == users["clerk"]["id"]

    # once the record exists, reading the certificate needs no write permission
    r = client.get(url, headers={"X-API-Key": VIEWER_KEY})
    assert r.status_code == 200, r.text
    assert r.json()["certificate"]["placeholder_record_created"] is False
