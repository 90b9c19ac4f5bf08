# parish_registry/models/baptism_record.py
from __future__ import annotations

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import relationship

from parish_registry.db import Base


class BaptismRecord(Base):
    """Baptism register entry, with optional later sacraments of the same person."""

    __tablename__ = "baptism_records"

    RECORD_PREFIX = "BAP"

    id = Column(Integer, primary_key=True, index=True)
    record_number = Column(String(50), nullable=False, unique=True, index=True)
    member_id = Column(Integer, ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True)

    # Birth / parentage
    father_name = Column(String(255), nullable=False)
    mother_name = Column(String(255), nullable=False)
    tribe = Column(String(255), nullable=False, index=True)
    birth_village = Column(String(255), nullable=False)
    county = Column(String(255), nullable=False)
    birth_date = Column(Date, nullable=False)
    residence = Column(Text, nullable=False)

    # Baptism
    baptism_location = Column(String(255), nullable=False, index=True)
    baptism_date = Column(Date, nullable=False, index=True)
    baptized_by = Column(String(255), nullable=False)
    sponsor = Column(String(255), nullable=False)

    # Eucharist
    eucharist_location = Column(String(255), nullable=True)
    eucharist_date = Column(Date, nullable=True)

    # Confirmation
    confirmation_location = Column(String(255), nullable=True)
    confirmation_date = Column(Date, nullable=True)
    confirmation_number = Column(String(50), nullable=True)
    confirmation_register_number = Column(String(50), nullable=True)

    # Marriage ("together with")
    marriage_spouse = Column(String(255), nullable=True)
    marriage_location = Column(String(255), nullable=True)
    marriage_date = Column(Date, nullable=True)
    marriage_register_number = Column(String(50), nullable=True)
    marriage_number = Column(String(50), nullable=True)

    baptism_sacrament_id = Column(Integer, ForeignKey("sacraments.id", ondelete="SET NULL"), nullable=True)
    eucharist_sacrament_id = Column(Integer, ForeignKey("sacraments.id", ondelete="SET NULL"), nullable=True)
    confirmation_sacrament_id = Column(Integer, ForeignKey("sacraments.id", ondelete="SET NULL"), nullable=True)
    marriage_sacrament_id = Column(Integer, ForeignKey("sacraments.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    member = relationship("Member", lazy="joined")
    baptism_sacrament = relationship("Sacrament", foreign_keys=[baptism_sacrament_id])
    eucharist_sacrament = relationship("Sacrament", foreign_keys=[eucharist_sacrament_id])
    confirmation_sacrament = relationship("Sacrament", foreign_keys=[confirmation_sacrament_id])
    marriage_sacrament = relationship("Sacrament", foreign_keys=[marriage_sacrament_id])

    __table_args__ = (
        Index("ix_baptism_records_parents", "father_name", "mother_name"),
    )

    def sacrament_ids(self) -> list[int]:
        return [
            sid
            for sid in (
                self.baptism_sacrament_id,
                self.eucharist_sacrament_id,
                self.confirmation_sacrament_id,
                self.marriage_sacrament_id,
            )
            if sid is not None
        ]
