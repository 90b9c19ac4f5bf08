# parish_registry/services/community_groups.py
"""
Community groups (CWA, CMA, Youth, Choir, ...).

There is no groups table: a group is a distinct non-empty
`Member.church_group` value, and its figures are aggregated from members.
"""
from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import case, func, or_, select
from sqlalchemy.orm import Session

from parish_registry.models.member import Member, MembershipStatus
from parish_registry.services import query
from parish_registry.services.errors import RecordNotFoundError

SORT_KEYS = ("name", "members_count", "active_members", "inactive_members")

DESCRIPTIONS = {
    "PMC": "Pontifical Missionary Childhood, children's mission group",
    "Youth": "Young adults and teenagers ministry",
    "Young Parents": "Parents with young children fellowship group",
    "C.W.A": "Catholic Women Association, women fellowship",
    "CMA": "Catholic Men Association, men fellowship",
    "Choir": "Parish music ministry and worship team",
}


def group_slug(name: str) -> str:
    slug = re.sub(r"[.(),]", "", name.lower())
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    return slug.strip("-")


def _has_group():
    return (Member.church_group.is_not(None), Member.church_group != "")


def _group_rows(db: Session, names: Optional[List[str]] = None, search: Optional[str] = None):
    cnt = func.count(Member.id)
    active = func.sum(case((Member.membership_status == MembershipStatus.active, 1), else_=0))
    stmt = (
        select(
            Member.church_group,
            cnt,
            active,
            func.min(Member.created_at),
            func.max(Member.created_at),
        )
        .where(*_has_group())
        .group_by(Member.church_group)
    )
    if names is not None:
        stmt = stmt.where(Member.church_group.in_(names))
    if search:
        stmt = stmt.where(Member.church_group.ilike(query.like(search)))
    return db.execute(stmt).all()


def _details(row) -> Dict[str, Any]:
    name, total, active, first_joined, latest_joined = row
    active = int(active or 0)
    return {
        "name": name,
        "slug": group_slug(name),
        "description": DESCRIPTIONS.get(name, "Church ministry group"),
        "members_count": total,
        "active_members": active,
        "inactive_members": total - active,
        "first_member_joined": first_joined,
        "latest_member_joined": latest_joined,
    }


def group_statistics(
    db: Session,
    search: Optional[str] = None,
    sort: str = "members_count",
    direction: str = "desc",
) -> Dict[str, Any]:
    groups = [_details(r) for r in _group_rows(db, search=search)]
    if sort not in SORT_KEYS:
        sort = "members_count"
    groups.sort(key=lambda g: (g[sort], g["name"]), reverse=direction == "desc")

    total_members = sum(g["members_count"] for g in groups)
    most_popular = max(groups, key=lambda g: g["members_count"], default=None)
    return {
        "total_groups": len(groups),
        "total_members": total_members,
        "average_members_per_group": round(total_members / len(groups), 1) if groups else 0,
        "most_popular_group": most_popular["name"] if most_popular else None,
        "groups_breakdown": groups,
    }


def resolve_group(db: Session, ref: str) -> str:
    """Map a URL reference (exact name, slug, or a fragment) to a stored group name."""
    names = list(
        db.execute(select(Member.church_group).where(*_has_group()).distinct().order_by(Member.church_group))
        .scalars()
        .all()
    )
    if ref in names:
        return ref
    for name in names:
        if group_slug(name) == group_slug(ref):
            return name
    spaced = ref.replace("-", " ").replace("_", " ").lower()
    for name in names:
        if spaced and spaced in name.lower():
            return name
    raise RecordNotFoundError(f"Church group '{ref}' not found")


def get_group(
    db: Session,
    ref: str,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 20,
) -> Tuple[Dict[str, Any], int, List[Member]]:
    """Group figures plus one page of its members (optionally filtered)."""
    name = resolve_group(db, ref)
    details = _details(_group_rows(db, names=[name])[0])

    conds = [Member.church_group == name]
    if search:
        like = query.like(search)
        conds.append(
            or_(
                Member.first_name.ilike(like),
                Member.middle_name.ilike(like),
                Member.last_name.ilike(like),
                Member.phone.ilike(like),
                Member.email.ilike(like),
            )
        )
    total = db.execute(select(func.count(Member.id)).where(*conds)).scalar_one()
    members = (
        db.execute(
            select(Member)
            .where(*conds)
            .order_by(Member.last_name.asc(), Member.first_name.asc(), Member.id.asc())
            .offset(skip)
            .limit(limit)
        )
        .scalars()
        .all()
    )
    return details, total, list(members)
