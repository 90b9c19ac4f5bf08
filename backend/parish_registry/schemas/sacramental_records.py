# parish_registry/schemas/sacramental_records.py
"""
Request/response models for the baptism and marriage registers.

Form submissions often send "" for untouched optional inputs; `_BlankAsNone`
turns those into None before validation so "date present" checks mean what
they say.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, constr, model_validator

from parish_registry.schemas.sacrament import SacramentRead

Name = constr(strip_whitespace=True, min_length=1, max_length=255)
ShortRef = constr(strip_whitespace=True, max_length=50)


class _BlankAsNone(BaseModel):
    @model_validator(mode="before")
    @classmethod
    def blank_strings_to_none(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: (None if isinstance(v, str) and not v.strip() else v) for k, v in data.items()}
        return data


# ─────────────────────────────────────────────────────────────────────────────
# Baptism
# ─────────────────────────────────────────────────────────────────────────────

class BaptismRecordCreate(_BlankAsNone):
    member_id: int

    father_name: Name
    mother_name: Name
    tribe: Name
    birth_village: Name
    county: Name
    birth_date: date
    residence: Name

    baptism_location: Name
    baptism_date: date
    baptized_by: Name
    sponsor: Name

    eucharist_location: Optional[Name] = None
    eucharist_date: Optional[date] = None

    confirmation_location: Optional[Name] = None
    confirmation_date: Optional[date] = None
    confirmation_number: Optional[ShortRef] = None
    confirmation_register_number: Optional[ShortRef] = None

    marriage_spouse: Optional[Name] = None
    marriage_location: Optional[Name] = None
    marriage_date: Optional[date] = None
    marriage_register_number: Optional[ShortRef] = None
    marriage_number: Optional[ShortRef] = None

    # Register references for the baptism Sacrament row itself
    certificate_number: Optional[constr(max_length=100)] = None
    book_number: Optional[ShortRef] = None
    page_number: Optional[ShortRef] = None
    notes: Optional[str] = None


class BaptismRecordUpdate(_BlankAsNone):
    father_name: Optional[Name] = None
    mother_name: Optional[Name] = None
    tribe: Optional[Name] = None
    birth_village: Optional[Name] = None
    county: Optional[Name] = None
    birth_date: Optional[date] = None
    residence: Optional[Name] = None
    baptism_location: Optional[Name] = None
    baptism_date: Optional[date] = None
    baptized_by: Optional[Name] = None
    sponsor: Optional[Name] = None
    eucharist_location: Optional[Name] = None
    eucharist_date: Optional[date] = None
    confirmation_location: Optional[Name] = None
    confirmation_date: Optional[date] = None
    confirmation_number: Optional[ShortRef] = None
    confirmation_register_number: Optional[ShortRef] = None
    marriage_spouse: Optional[Name] = None
    marriage_location: Optional[Name] = None
    marriage_date: Optional[date] = None
    marriage_register_number: Optional[ShortRef] = None
    marriage_number: Optional[ShortRef] = None


class BaptismRecordRead(BaseModel):
    id: int
    record_number: str
    member_id: int

    father_name: str
    mother_name: str
    tribe: str
    birth_village: str
    county: str
    birth_date: date
    residence: str

    baptism_location: str
    baptism_date: date
    baptized_by: str
    sponsor: str

    eucharist_location: Optional[str] = None
    eucharist_date: Optional[date] = None
    confirmation_location: Optional[str] = None
    confirmation_date: Optional[date] = None
    confirmation_number: Optional[str] = None
    confirmation_register_number: Optional[str] = None
    marriage_spouse: Optional[str] = None
    marriage_location: Optional[str] = None
    marriage_date: Optional[date] = None
    marriage_register_number: Optional[str] = None
    marriage_number: Optional[str] = None

    baptism_sacrament_id: Optional[int] = None
    eucharist_sacrament_id: Optional[int] = None
    confirmation_sacrament_id: Optional[int] = None
    marriage_sacrament_id: Optional[int] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BaptismRecordDetail(BaptismRecordRead):
    """Baptism record with its linked sacrament rows."""
    baptism_sacrament: Optional[SacramentRead] = None
    eucharist_sacrament: Optional[SacramentRead] = None
    confirmation_sacrament: Optional[SacramentRead] = None
    marriage_sacrament: Optional[SacramentRead] = None


# ─────────────────────────────────────────────────────────────────────────────
# Marriage
# ─────────────────────────────────────────────────────────────────────────────

class _MarriageFields(_BlankAsNone):
    husband_tribe: Optional[Name] = None
    husband_clan: Optional[Name] = None
    husband_birth_place: Optional[Name] = None
    husband_domicile: Optional[Name] = None
    husband_baptized_at: Optional[Name] = None
    husband_baptism_date: Optional[date] = None
    husband_widower_of: Optional[Name] = None
    husband_parent_consent: Optional[bool] = None

    wife_tribe: Optional[Name] = None
    wife_clan: Optional[Name] = None
    wife_birth_place: Optional[Name] = None
    wife_domicile: Optional[Name] = None
    wife_baptized_at: Optional[Name] = None
    wife_baptism_date: Optional[date] = None
    wife_widow_of: Optional[Name] = None
    wife_parent_consent: Optional[bool] = None

    banas_number: Optional[ShortRef] = None
    banas_church_1: Optional[Name] = None
    banas_date_1: Optional[date] = None
    banas_church_2: Optional[Name] = None
    banas_date_2: Optional[date] = None

    dispensation_from: Optional[Name] = None
    dispensation_given_by: Optional[Name] = None
    dispensation_impediment: Optional[Name] = None
    dispensation_date: Optional[date] = None

    district: Optional[Name] = None
    province: Optional[Name] = None
    delegated_by: Optional[Name] = None
    delegation_date: Optional[date] = None

    male_witness_father: Optional[Name] = None
    male_witness_clan: Optional[Name] = None
    female_witness_father: Optional[Name] = None
    female_witness_clan: Optional[Name] = None

    civil_marriage_certificate_number: Optional[constr(max_length=100)] = None
    other_documents: Optional[constr(max_length=255)] = None


class MarriageRecordCreate(_MarriageFields):
    husband_id: Optional[int] = None
    wife_id: Optional[int] = None
    record_number: Optional[ShortRef] = None

    husband_name: Name
    husband_father_name: Name
    husband_mother_name: Name
    wife_name: Name
    wife_father_name: Name
    wife_mother_name: Name

    marriage_date: date
    marriage_church: Name
    presence_of: Name

    male_witness_name: Name
    female_witness_name: Name


class MarriageRecordUpdate(_MarriageFields):
    husband_id: Optional[int] = None
    wife_id: Optional[int] = None

    husband_name: Optional[Name] = None
    husband_father_name: Optional[Name] = None
    husband_mother_name: Optional[Name] = None
    wife_name: Optional[Name] = None
    wife_father_name: Optional[Name] = None
    wife_mother_name: Optional[Name] = None

    marriage_date: Optional[date] = None
    marriage_church: Optional[Name] = None
    presence_of: Optional[Name] = None
    male_witness_name: Optional[Name] = None
    female_witness_name: Optional[Name] = None


class MarriageRecordRead(BaseModel):
    id: int
    record_number: str

    husband_id: Optional[int] = None
    husband_name: Optional[str] = None
    husband_father_name: Optional[str] = None
    husband_mother_name: Optional[str] = None
    husband_tribe: Optional[str] = None
    husband_clan: Optional[str] = None
    husband_birth_place: Optional[str] = None
    husband_domicile: Optional[str] = None
    husband_baptized_at: Optional[str] = None
    husband_baptism_date: Optional[date] = None
    husband_widower_of: Optional[str] = None
    husband_parent_consent: Optional[bool] = None

    wife_id: Optional[int] = None
    wife_name: Optional[str] = None
    wife_father_name: Optional[str] = None
    wife_mother_name: Optional[str] = None
    wife_tribe: Optional[str] = None
    wife_clan: Optional[str] = None
    wife_birth_place: Optional[str] = None
    wife_domicile: Optional[str] = None
    wife_baptized_at: Optional[str] = None
    wife_baptism_date: Optional[date] = None
    wife_widow_of: Optional[str] = None
    wife_parent_consent: Optional[bool] = None

    banas_number: Optional[str] = None
    banas_church_1: Optional[str] = None
    banas_date_1: Optional[date] = None
    banas_church_2: Optional[str] = None
    banas_date_2: Optional[date] = None
    dispensation_from: Optional[str] = None
    dispensation_given_by: Optional[str] = None
    dispensation_impediment: Optional[str] = None
    dispensation_date: Optional[date] = None

    marriage_date: date
    marriage_church: str
    district: Optional[str] = None
    province: Optional[str] = None
    presence_of: str
    delegated_by: Optional[str] = None
    delegation_date: Optional[date] = None

    male_witness_name: str
    male_witness_father: Optional[str] = None
    male_witness_clan: Optional[str] = None
    female_witness_name: str
    female_witness_father: Optional[str] = None
    female_witness_clan: Optional[str] = None

    civil_marriage_certificate_number: Optional[str] = None
    other_documents: Optional[str] = None

    sacrament_id: Optional[int] = None
    parish_priest_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MarriageRecordDetail(MarriageRecordRead):
    sacrament: Optional[SacramentRead] = None


# ─────────────────────────────────────────────────────────────────────────────
# Envelopes
# ─────────────────────────────────────────────────────────────────────────────

class RecordEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    record: Optional[Any] = None


class RecordPage(BaseModel):
    total: int
    items: List[Any] = Field(default_factory=list)
