# backend/tests/test_bootstrap.py
from __future__ import annotations

from sqlalchemy import func, select

from parish_registry.bootstrap import DEFAULT_ROLES, ensure_admin
from parish_registry.models import Role, User


def test_bootstrap_is_idempotent(db, client, monkeypatch):
    user, key = ensure_admin(db, "Admin@Local", api_key="bootstrap-key-000000")
    assert key == "bootstrap-key-000000"
    assert user.email == "admin@local"

    again, key2 = ensure_admin(db, "admin@local")
    assert again.id == user.id
    assert key2 is None
    assert db.execute(select(func.count()).select_from(User)).scalar_one() == 1
    assert db.execute(select(func.count()).select_from(Role)).scalar_one() == len(DEFAULT_ROLES)

    monkeypatch.setenv("RBAC_ENFORCE", "true")
    me = client.get("/rbac/me", headers={"X-API-Key": "bootstrap-key-000000"})
    assert me.status_code == 200, me.text
    assert me.json()["permissions"] == ["*"]


def test_rotate_replaces_key(db, client, monkeypatch):
    ensure_admin(db, "admin@local", api_key="first-key-0000000000")
    _, new_key = ensure_admin(db, "admin@local", rotate=True)
    assert new_key and new_key != "first-key-0000000000"

    monkeypatch.setenv("RBAC_ENFORCE", "true")
    assert client.get("/rbac/me", headers={"X-API-Key": "first-key-0000000000"}).status_code == 401
    assert client.get("/rbac/me", headers={"X-API-Key": new_key}).status_code == 200
