# parish_registry/models/sacrament.py
"""SQLAlchemy model for Sacrament fact rows.

A Sacrament row records that a member received a sacrament on a date. Rows
written by the sacramental-record paths also point at one detail record
(BaptismRecord or MarriageRecord) through `detailed_record_type` /
`detailed_record_id`.
"""

from __future__ import annotations

import enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
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


class SacramentType(str, enum.Enum):
    """Enumeration of supported sacraments."""
    baptism = "baptism"
    confirmation = "confirmation"
    first_communion = "first_communion"
    marriage = "marriage"
    holy_orders = "holy_orders"
    anointing_of_sick = "anointing_of_sick"
    eucharist = "eucharist"


class DetailedRecordKind(str, enum.Enum):
    """Closed set of detail tables a Sacrament row may point at."""
    baptism_record = "baptism_record"
    marriage_record = "marriage_record"


class Sacrament(Base):
    """Database table representing a single administered sacrament."""

    __tablename__ = "sacraments"

    id = Column(Integer, primary_key=True, index=True)

    member_id = Column(
        Integer,
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    sacrament_type = Column(
        Enum(SacramentType, name="sacrament_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
    )
    sacrament_date = Column(Date, nullable=False, index=True)

    location = Column(String(255), nullable=True, index=True)
    celebrant = Column(String(255), nullable=True)
    witness_1 = Column(String(255), nullable=True)
    witness_2 = Column(String(255), nullable=True)
    godparent_1 = Column(String(255), nullable=True)
    godparent_2 = Column(String(255), nullable=True)

    certificate_number = Column(String(100), nullable=True, index=True)
    book_number = Column(String(50), nullable=True)
    page_number = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)

    recorded_by = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    detailed_record_type = Column(
        Enum(DetailedRecordKind, name="detailed_record_kind", values_callable=lambda e: [m.value for m in e]),
        nullable=True,
    )
    detailed_record_id = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # --- Relationships --------------------------------------------------- #
    member = relationship("Member", back_populates="sacraments", lazy="joined")

    __table_args__ = (
        Index("ix_sacraments_member_type", "member_id", "sacrament_type"),
        Index("ix_sacraments_type_date", "sacrament_type", "sacrament_date"),
        CheckConstraint(
            "(detailed_record_type IS NULL) = (detailed_record_id IS NULL)",
            name="ck_sacraments_detail_pointer_pair",
        ),
    )

    def link_detail(self, kind: DetailedRecordKind, record_id: int) -> None:
        self.detailed_record_type = kind
        self.detailed_record_id = record_id

    def unlink_detail(self) -> None:
        self.detailed_record_type = None
        self.detailed_record_id = None

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<Sacrament(id={self.id}, type={self.sacrament_type}, date={self.sacrament_date}, "
            f"member_id={self.member_id})>"
        )
