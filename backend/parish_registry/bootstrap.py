# parish_registry/bootstrap.py
"""
Seed the RBAC tables: the standard parish roles plus one admin user.

Safe to run repeatedly. Prints the admin API key when it is created or
rotated; only its hash is stored.

    parish-registry-bootstrap --email admin@local
    parish-registry-bootstrap --email admin@local --rotate
"""
from __future__ import annotations

import argparse
import logging
import secrets
import uuid
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

import parish_registry.models  # noqa: F401
from parish_registry.api.rbac import _hash_api_key
from parish_registry.db import SessionLocal
from parish_registry.models.rbac import Role, RolePermission, User, UserRole

logger = logging.getLogger(__name__)

DEFAULT_ROLES: Dict[str, Tuple[str, List[str]]] = {
    "admin": ("Full access", ["*"]),
    "priest": ("Parish priest", ["records:*", "sacraments:*", "members:*", "activities:*", "reports:read"]),
    "clerk": (
        "Parish office clerk",
        ["members:*", "records:write", "sacraments:write", "tithes:write", "activities:write"],
    ),
    "treasurer": ("Contributions and reports", ["tithes:*", "reports:read"]),
    "viewer": ("Read-only reports", ["reports:read"]),
}


def ensure_roles(db: Session) -> Dict[str, Role]:
    roles: Dict[str, Role] = {}
    for name, (description, perms) in DEFAULT_ROLES.items():
        role = db.execute(select(Role).where(Role.name == name)).scalars().first()
        if role is None:
            role = Role(id=uuid.uuid4(), name=name, description=description)
            db.add(role)
            db.flush()
        have = {rp.permission for rp in role.permissions}
        for p in perms:
            if p not in have:
                role.permissions.append(RolePermission(permission=p))
        roles[name] = role
    db.flush()
    return roles


def ensure_admin(
    db: Session,
    email: str,
    api_key: Optional[str] = None,
    rotate: bool = False,
) -> Tuple[User, Optional[str]]:
    """Create or update the admin user. Returns the plaintext key when one was set."""
    roles = ensure_roles(db)
    email = email.strip().lower()

    issued = None
    user = db.execute(select(User).where(User.email == email)).scalars().first()
    if user is None:
        issued = api_key or secrets.token_urlsafe(32)
        user = User(id=uuid.uuid4(), email=email, display_name="Admin", api_key_hash=_hash_api_key(issued))
        db.add(user)
        db.flush()
    elif rotate:
        issued = api_key or secrets.token_urlsafe(32)
        user.api_key_hash = _hash_api_key(issued)

    admin_role = roles["admin"]
    linked = db.get(UserRole, (user.id, admin_role.id))
    if linked is None:
        db.add(UserRole(user_id=user.id, role_id=admin_role.id))

    db.commit()
    return user, issued


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Seed parish registry roles and the admin user.")
    parser.add_argument("--email", default="admin@local")
    parser.add_argument("--api-key", default=None, help="use this key instead of generating one")
    parser.add_argument("--rotate", action="store_true", help="issue a new key for an existing admin")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    db = SessionLocal()
    try:
        user, issued = ensure_admin(db, args.email, api_key=args.api_key, rotate=args.rotate)
    finally:
        db.close()

    logger.info("admin user %s ready", args.email)
    if issued:
        print("API_KEY:", issued)
    print("BOOTSTRAP_OK")


if __name__ == "__main__":
    main()
