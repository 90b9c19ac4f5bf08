# backend/tests/test_community_groups.py
from __future__ import annotations

import pytest

from parish_registry.services.community_groups import group_slug


@pytest.fixture
def parish(make_member):
    make_member(first_name="Grace", church_group="C.W.A")
    make_member(first_name="Mercy", church_group="C.W.A")
    make_member(first_name="Lucy", church_group="C.W.A", membership_status="inactive")
    make_member(first_name="Brian", last_name="Otieno", gender="Male", church_group="Youth")
    make_member(first_name="Kevin", last_name="Kamau", gender="Male", church_group="Young Parents")
    make_member(first_name="Faith", church_group="Young Parents")
    make_member(first_name="Nobody", church_group=None)


def test_group_slug():
    assert group_slug("C.W.A") == "cwa"
    assert group_slug("Young Parents") == "young-parents"
    assert group_slug("PMC (Children)") == "pmc-children"


def test_list_groups(client, parish):
    r = client.get("/community-groups/")
    assert r.status_code == 200
    body = r.json()
    assert body["total_groups"] == 3
    assert body["total_members"] == 6
    assert body["average_members_per_group"] == 2.0
    assert body["most_popular_group"] == "C.W.A"

    cwa = body["groups_breakdown"][0]
    assert cwa["name"] == "C.W.A"
    assert cwa["slug"] == "cwa"
    assert cwa["members_count"] == 3
    assert cwa["active_members"] == 2
    assert cwa["inactive_members"] == 1
    assert "Women" in cwa["description"]
    assert cwa["first_member_joined"] is not None


def test_list_groups_sort_and_search(client, parish):
    r = client.get("/community-groups/", params={"sort": "name", "direction": "asc"})
    assert [g["name"] for g in r.json()["groups_breakdown"]] == ["C.W.A", "Young Parents", "Youth"]

    r = client.get("/community-groups/", params={"search": "you"})
    assert {g["name"] for g in r.json()["groups_breakdown"]} == {"Young Parents", "Youth"}

    assert client.get("/community-groups/", params={"sort": "bogus"}).status_code == 422


def test_statistics_on_empty_parish(client):
    r = client.get("/community-groups/statistics")
    assert r.status_code == 200
    assert r.json() == {
        "total_groups": 0,
        "total_members": 0,
        "average_members_per_group": 0,
        "most_popular_group": None,
        "groups_breakdown": [],
    }


def test_show_group_by_name_or_slug(client, parish):
    for ref in ("C.W.A", "cwa"):
        r = client.get(f"/community-groups/{ref}")
        assert r.status_code == 200, ref
        assert r.json()["group"]["name"] == "C.W.A"
        assert r.json()["members"]["total"] == 3

    r = client.get("/community-groups/young-parents")
    assert r.status_code == 200
    assert r.json()["group"]["members_count"] == 2
    assert {m["first_name"] for m in r.json()["members"]["items"]} == {"Kevin", "Faith"}


def test_show_group_member_search_and_paging(client, parish):
    r = client.get("/community-groups/cwa", params={"search": "mer"})
    assert r.json()["members"]["total"] == 1
    assert r.json()["members"]["items"][0]["first_name"] == "Mercy"
    # group figures ignore the member filter
    assert r.json()["group"]["members_count"] == 3

    r = client.get("/community-groups/cwa", params={"skip": 2, "limit": 2})
    assert r.json()["members"]["total"] == 3
    assert len(r.json()["members"]["items"]) == 1


def test_unknown_group_is_404(client, parish):
    r = client.get("/community-groups/legion-of-mary")
    assert r.status_code == 404
    assert "legion-of-mary" in r.json()["detail"]
