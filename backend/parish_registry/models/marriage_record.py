# parish_registry/models/marriage_record.py
from __future__ import annotations

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import relationship

from parish_registry.db import Base


class MarriageRecord(Base):
    """Marriage register entry. Either spouse may be a registered member, or neither."""

    __tablename__ = "marriage_records"

    RECORD_PREFIX = "MAR"

    id = Column(Integer, primary_key=True, index=True)
    record_number = Column(String(50), nullable=False, unique=True, index=True)

    # --- Husband -------------------------------------------------------------
    husband_name = Column(String(255), nullable=True)
    husband_father_name = Column(String(255), nullable=True)
    husband_mother_name = Column(String(255), nullable=True)
    husband_tribe = Column(String(255), nullable=True)
    husband_clan = Column(String(255), nullable=True)
    husband_birth_place = Column(String(255), nullable=True)
    husband_domicile = Column(String(255), nullable=True)
    husband_baptized_at = Column(String(255), nullable=True)
    husband_baptism_date = Column(Date, nullable=True)
    husband_widower_of = Column(String(255), nullable=True)
    husband_parent_consent = Column(Boolean, nullable=True)

    # --- Wife ----------------------------------------------------------------
    wife_name = Column(String(255), nullable=True)
    wife_father_name = Column(String(255), nullable=True)
    wife_mother_name = Column(String(255), nullable=True)
    wife_tribe = Column(String(255), nullable=True)
    wife_clan = Column(String(255), nullable=True)
    wife_birth_place = Column(String(255), nullable=True)
    wife_domicile = Column(String(255), nullable=True)
    wife_baptized_at = Column(String(255), nullable=True)
    wife_baptism_date = Column(Date, nullable=True)
    wife_widow_of = Column(String(255), nullable=True)
    wife_parent_consent = Column(Boolean, nullable=True)

    # --- Banns & dispensation ------------------------------------------------
    banas_number = Column(String(50), nullable=True)
    banas_church_1 = Column(String(255), nullable=True)
    banas_date_1 = Column(Date, nullable=True)
    banas_church_2 = Column(String(255), nullable=True)
    banas_date_2 = Column(Date, nullable=True)
    dispensation_from = Column(String(255), nullable=True)
    dispensation_given_by = Column(String(255), nullable=True)
    dispensation_impediment = Column(String(255), nullable=True)
    dispensation_date = Column(Date, nullable=True)

    # --- Ceremony ------------------------------------------------------------
    marriage_date = Column(Date, nullable=False, index=True)
    marriage_church = Column(String(255), nullable=False, index=True)
    district = Column(String(255), nullable=True)
    province = Column(String(255), nullable=True)
    presence_of = Column(String(255), nullable=False)
    delegated_by = Column(String(255), nullable=True)
    delegation_date = Column(Date, nullable=True)

    # --- Witnesses -----------------------------------------------------------
    male_witness_name = Column(String(255), nullable=False)
    male_witness_father = Column(String(255), nullable=True)
    male_witness_clan = Column(String(255), nullable=True)
    female_witness_name = Column(String(255), nullable=False)
    female_witness_father = Column(String(255), nullable=True)
    female_witness_clan = Column(String(255), nullable=True)

    civil_marriage_certificate_number = Column(String(100), nullable=True)
    other_documents = Column(Text, nullable=True)

    # --- Links ---------------------------------------------------------------
    husband_id = Column(Integer, ForeignKey("members.id", ondelete="SET NULL"), nullable=True)
    wife_id = Column(Integer, ForeignKey("members.id", ondelete="SET NULL"), nullable=True)
    sacrament_id = Column(Integer, ForeignKey("sacraments.id", ondelete="SET NULL"), nullable=True, index=True)
    parish_priest_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    husband = relationship("Member", foreign_keys=[husband_id])
    wife = relationship("Member", foreign_keys=[wife_id])
    sacrament = relationship("Sacrament", foreign_keys=[sacrament_id])

    __table_args__ = (
        Index("ix_marriage_records_spouse_names", "husband_name", "wife_name"),
        Index("ix_marriage_records_spouse_ids", "husband_id", "wife_id"),
        CheckConstraint(
            "husband_name IS NOT NULL OR wife_name IS NOT NULL",
            name="ck_marriage_records_a_spouse_named",
        ),
    )
