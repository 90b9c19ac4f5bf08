# backend/tests/conftest.py
"""
Every test runs against a throwaway SQLite file. DATABASE_URL has to be set
before parish_registry.db is imported, since the engine is built at import.
"""
from __future__ import annotations

import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="parish_registry_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'registry.db')}"
os.environ["RBAC_ENFORCE"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import parish_registry.models  # noqa: E402,F401
from parish_registry.db import Base, SessionLocal, engine  # noqa: E402
from parish_registry.main import app  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(autouse=True)
def _clean_tables():
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_member(client):
    """POST a member and return its JSON; keyword args override the defaults."""
    def _make(**overrides):
        payload = {"first_name": "Grace", "last_name": "Wambui", "gender": "Female"}
        payload.update(overrides)
        r = client.post("/members/", json=payload)
        assert r.status_code == 201, r.text
        return r.json()
    return _make


@pytest.fixture
def baptism_payload():
    def _payload(member_id: int, **overrides):
        payload = {
            "member_id": member_id,
            "father_name": "Joseph Kamau",
            "mother_name": "Mary Wanjiku",
            "tribe": "Kikuyu",
            "birth_village": "Gaichanjiru",
            "county": "Murang'a",
            "birth_date": "2024-01-02",
            "residence": "Kandara",
            "baptism_location": "Sacred Heart Kandara",
            "baptism_date": "2024-03-10",
            "baptized_by": "Fr. Peter Njoroge",
            "sponsor": "Anne Muthoni",
        }
        payload.update(overrides)
        return payload
    return _payload


@pytest.fixture
def marriage_payload():
    def _payload(**overrides):
        payload = {
            "husband_name": "John Mwangi",
            "husband_father_name": "Samuel Mwangi",
            "husband_mother_name": "Lucy Njeri",
            "wife_name": "Jane Akinyi",
            "wife_father_name": "Peter Otieno",
            "wife_mother_name": "Rose Achieng",
            "marriage_date": "2024-06-15",
            "marriage_church": "Sacred Heart Kandara",
            "presence_of": "Fr. Peter Njoroge",
            "male_witness_name": "David Kariuki",
            "female_witness_name": "Esther Nyambura",
        }
        payload.update(overrides)
        return payload
    return _payload
