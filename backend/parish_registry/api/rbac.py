# parish_registry/api/rbac.py
from __future__ import annotations

import hashlib
import secrets
import uuid
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence, Set

from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from parish_registry import config
from parish_registry.db import get_db
from parish_registry.models.rbac import Role, RolePermission, User, UserRole

router = APIRouter(prefix="/rbac", tags=["RBAC"])

# ---- Utilities ----------------------------------------------------------------

def _hash_api_key(api_key_plain: str) -> str:
    """Hash the plaintext API key. (sha256 hex; store only the hash)."""
    h = hashlib.sha256()
    h.update((api_key_plain + config.api_key_pepper()).encode("utf-8"))
    return h.hexdigest()


def _collect_user_permissions(db: Session, user_id: uuid.UUID) -> Set[str]:
    """Return the set of permission strings granted to the user via roles."""
    rows = (
        db.execute(
            select(RolePermission.permission)
            .join(UserRole, UserRole.role_id == RolePermission.role_id)
            .where(UserRole.user_id == user_id)
        )
        .scalars()
        .all()
    )
    return set(rows)


def _perm_match(user_perm: str, required: str) -> bool:
    """Wildcard-aware permission check."""
    if user_perm == "*":
        return True
    if user_perm.endswith(":*"):
        prefix = user_perm[:-2]
        return required == prefix or required.startswith(prefix + ":")
    return user_perm == required


def _has_permission(granted: Iterable[str], required: str) -> bool:
    return any(_perm_match(p, required) for p in granted)


class DevPrincipal:
    """Caller used when RBAC is not enforced. Has no users row, so nothing is attributed to it."""
    id = None
    email = "dev@local"
    display_name = "Dev"
    is_active = True


# ---- Auth dependencies ---------------------------------------------------------

def get_current_user(
    db: Session = Depends(get_db),
    api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
) -> User:
    """
    Resolve the calling user. In dev (RBAC_ENFORCE=false), return a lightweight
    dev principal and skip DB lookups entirely.
    """
    if not config.rbac_enforced():
        return DevPrincipal()  # type: ignore[return-value]

    if not api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-API-Key")

    user = (
        db.execute(
            select(User).where(and_(User.api_key_hash == _hash_api_key(api_key), User.is_active.is_(True)))
        )
        .scalars()
        .first()
    )
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")
    return user


def check_permission(db: Session, user: User, required_permission: str) -> None:
    """Raise 403 unless the user holds the permission. No-op when RBAC is off."""
    if not config.rbac_enforced():
        return
    granted = _collect_user_permissions(db, user.id)
    if not _has_permission(granted, required_permission):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Missing permission: {required_permission}",
        )


def require_permission(required_permission: str) -> Callable[..., User]:
    """Dependency factory to enforce a specific permission (wildcards supported)."""
    def _inner(
        db: Session = Depends(get_db),
        user: User = Depends(get_current_user),
    ) -> User:
        check_permission(db, user, required_permission)
        return user
    return _inner


# ---- Schemas ------------------------------------------------------------------

class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None
    permissions: List[str] = Field(default_factory=list)


class RoleOut(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    permissions: List[str]
    created_at: Optional[datetime] = None

    @classmethod
    def from_orm_with_perms(cls, role: Role, perms: Sequence[str]) -> "RoleOut":
        return cls(
            id=role.id,
            name=role.name,
            description=role.description,
            permissions=sorted(set(perms)),
            created_at=role.created_at,
        )


class UserCreate(BaseModel):
    email: str
    display_name: Optional[str] = None
    role_ids: List[uuid.UUID] = Field(default_factory=list)
    api_key_plain: Optional[str] = Field(default=None, min_length=16)  # returned once


class UserOut(BaseModel):
    id: uuid.UUID
    email: str
    display_name: Optional[str]
    is_active: bool
    role_ids: List[uuid.UUID]
    api_key: Optional[str] = None  # only on creation


class WhoAmI(BaseModel):
    id: Optional[uuid.UUID]
    email: str
    display_name: Optional[str]
    permissions: List[str]
    enforced: bool


# ---- Role endpoints -----------------------------------------------------------

@router.post(
    "/roles",
    response_model=RoleOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission("rbac:manage"))],
)
def create_role(payload: RoleCreate, db: Session = Depends(get_db)):
    role = Role(id=uuid.uuid4(), name=payload.name.strip(), description=payload.description)
    db.add(role)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Role name already exists")

    perms = [p.strip() for p in payload.permissions if p.strip()]
    for p in set(perms):
        db.add(RolePermission(role_id=role.id, permission=p))
    db.commit()
    db.refresh(role)
    return RoleOut.from_orm_with_perms(role, perms)


@router.get("/roles", response_model=List[RoleOut], dependencies=[Depends(require_permission("rbac:manage"))])
def list_roles(db: Session = Depends(get_db)):
    roles = db.execute(select(Role).order_by(Role.name)).scalars().all()
    return [RoleOut.from_orm_with_perms(r, [rp.permission for rp in r.permissions]) for r in roles]


# ---- User endpoints -----------------------------------------------------------

@router.post(
    "/users",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission("rbac:manage"))],
)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    for rid in payload.role_ids:
        if db.get(Role, rid) is None:
            raise HTTPException(status_code=422, detail=f"Role {rid} not found")

    api_key_plain = payload.api_key_plain or secrets.token_urlsafe(32)
    user = User(
        id=uuid.uuid4(),
        email=payload.email.strip().lower(),
        display_name=payload.display_name,
        api_key_hash=_hash_api_key(api_key_plain),
        is_active=True,
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="User email already exists")

    for rid in payload.role_ids:
        db.add(UserRole(user_id=user.id, role_id=rid))
    db.commit()

    return UserOut(
        id=user.id,
        email=user.email,
        display_name=user.display_name,
        is_active=user.is_active,
        role_ids=payload.role_ids,
        api_key=api_key_plain,
    )


@router.get("/me", response_model=WhoAmI)
def whoami(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if not config.rbac_enforced():
        return WhoAmI(id=None, email=user.email, display_name=user.display_name, permissions=["*"], enforced=False)
    return WhoAmI(
        id=user.id,
        email=user.email,
        display_name=user.display_name,
        permissions=sorted(_collect_user_permissions(db, user.id)),
        enforced=True,
    )


def acting_user_id(user) -> Optional[uuid.UUID]:
    """Id to store in recorded_by / parish_priest_id columns."""
    return getattr(user, "id", None)
