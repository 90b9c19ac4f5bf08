# parish_registry/schemas/member.py
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from parish_registry.models.member import Gender, MatrimonyStatus, MembershipStatus


class MemberBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    middle_name: Optional[str] = Field(None, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    id_number: Optional[str] = Field(None, max_length=20)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=100)
    residence: Optional[str] = None
    local_church: Optional[str] = Field(None, max_length=100)
    church_group: Optional[str] = Field(None, max_length=100)
    tribe: Optional[str] = Field(None, max_length=50)
    clan: Optional[str] = Field(None, max_length=50)
    occupation: Optional[str] = Field(None, max_length=100)
    membership_status: MembershipStatus = MembershipStatus.active
    membership_date: Optional[date] = None
    matrimony_status: MatrimonyStatus = MatrimonyStatus.single
    baptism_date: Optional[date] = None
    confirmation_date: Optional[date] = None
    marriage_date: Optional[date] = None
    marriage_location: Optional[str] = Field(None, max_length=100)
    family_id: Optional[int] = None
    notes: Optional[str] = None

    # Pydantic v2: allows ORM objects to be returned directly
    model_config = ConfigDict(from_attributes=True)


class MemberCreate(MemberBase):
    pass


class MemberUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    middle_name: Optional[str] = None
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    id_number: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    residence: Optional[str] = None
    local_church: Optional[str] = None
    church_group: Optional[str] = None
    tribe: Optional[str] = None
    clan: Optional[str] = None
    occupation: Optional[str] = None
    membership_status: Optional[MembershipStatus] = None
    membership_date: Optional[date] = None
    matrimony_status: Optional[MatrimonyStatus] = None
    baptism_date: Optional[date] = None
    confirmation_date: Optional[date] = None
    marriage_date: Optional[date] = None
    marriage_location: Optional[str] = None
    family_id: Optional[int] = None
    notes: Optional[str] = None


class MemberStatusUpdate(BaseModel):
    membership_status: MembershipStatus


class MemberRead(MemberBase):
    id: int
    full_name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MemberPage(BaseModel):
    total: int
    items: List[MemberRead]


class SacramentSummary(BaseModel):
    """Sacrament dates derived from the registers rather than the member row."""
    member_id: int
    baptism_date: Optional[date] = None
    eucharist_date: Optional[date] = None
    confirmation_date: Optional[date] = None
    marriage_date: Optional[date] = None
    sacraments_received: List[str]
