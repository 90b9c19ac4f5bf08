# parish_registry/schemas/sacrament.py
from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from parish_registry.models.sacrament import DetailedRecordKind, SacramentType

# Accepted spellings that map onto a canonical SacramentType
_TYPE_ALIASES = {
    "matrimony": "marriage",
    "holy_matrimony": "marriage",
    "communion": "first_communion",
    "anointing": "anointing_of_sick",
}


def normalize_sacrament_type(value: Any) -> Any:
    """Return canonical lower-case sacrament type, mapping aliases (e.g. 'matrimony' -> 'marriage')."""
    if isinstance(value, SacramentType):
        return value
    if isinstance(value, str):
        v = value.strip().lower().replace(" ", "_").replace("-", "_")
        return _TYPE_ALIASES.get(v, v)
    return value


# ─────────────────────────────────────────────────────────────────────────────
# Base fields shared by create/read
# ─────────────────────────────────────────────────────────────────────────────

class _SacBase(BaseModel):
    member_id: Optional[int] = None
    sacrament_type: SacramentType
    sacrament_date: date
    location: Optional[str] = Field(None, max_length=255)
    celebrant: Optional[str] = Field(None, max_length=255)
    witness_1: Optional[str] = Field(None, max_length=255)
    witness_2: Optional[str] = Field(None, max_length=255)
    godparent_1: Optional[str] = Field(None, max_length=255)
    godparent_2: Optional[str] = Field(None, max_length=255)
    certificate_number: Optional[str] = Field(None, max_length=100)
    book_number: Optional[str] = Field(None, max_length=50)
    page_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("sacrament_type", mode="before")
    @classmethod
    def canonical_type(cls, v: Any) -> Any:
        return normalize_sacrament_type(v)


class SacramentCreate(_SacBase):
    member_id: int


class SacramentUpdate(BaseModel):
    member_id: Optional[int] = None
    sacrament_type: Optional[SacramentType] = None
    sacrament_date: Optional[date] = None
    location: Optional[str] = None
    celebrant: Optional[str] = None
    witness_1: Optional[str] = None
    witness_2: Optional[str] = None
    godparent_1: Optional[str] = None
    godparent_2: Optional[str] = None
    certificate_number: Optional[str] = None
    book_number: Optional[str] = None
    page_number: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("sacrament_type", mode="before")
    @classmethod
    def canonical_type(cls, v: Any) -> Any:
        return normalize_sacrament_type(v)


class SacramentRead(_SacBase):
    id: int
    recorded_by: Optional[UUID] = None
    detailed_record_type: Optional[DetailedRecordKind] = None
    detailed_record_id: Optional[int] = None
    created_at: Optional[datetime] = None


class SacramentPage(BaseModel):
    total: int
    items: List[SacramentRead]
