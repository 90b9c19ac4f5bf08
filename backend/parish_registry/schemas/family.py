from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from parish_registry.models.member import MembershipStatus


class FamilyBase(BaseModel):
    family_name: str = Field(..., min_length=1, max_length=255)
    family_code: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = None
    deanery: Optional[str] = None
    parish: Optional[str] = None
    head_of_family_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class FamilyCreate(FamilyBase):
    pass


class FamilyUpdate(BaseModel):
    family_name: Optional[str] = Field(None, min_length=1, max_length=255)
    family_code: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    deanery: Optional[str] = None
    parish: Optional[str] = None
    head_of_family_id: Optional[int] = None


class FamilyMember(BaseModel):
    id: int
    full_name: str
    membership_status: MembershipStatus

    model_config = ConfigDict(from_attributes=True)


class FamilyRead(FamilyBase):
    id: int
    members: List[FamilyMember] = []
