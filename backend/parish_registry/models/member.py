# parish_registry/models/member.py
from __future__ import annotations

import enum

from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from parish_registry.db import Base


def _values(enum_cls):
    return [m.value for m in enum_cls]


class Gender(str, enum.Enum):
    male = "Male"
    female = "Female"


class MembershipStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"
    transferred = "transferred"
    deceased = "deceased"


class MatrimonyStatus(str, enum.Enum):
    single = "single"
    married = "married"
    widowed = "widowed"
    separated = "separated"
    divorced = "divorced"


class Member(Base):
    __tablename__ = "members"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False, index=True)
    middle_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=False, index=True)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(Enum(Gender, name="member_gender", values_callable=_values), nullable=True, index=True)
    id_number = Column(String(20), nullable=True, unique=True)

    phone = Column(String(20), nullable=True)
    email = Column(String(100), nullable=True)
    residence = Column(Text, nullable=True)

    local_church = Column(String(100), nullable=True, index=True)
    church_group = Column(String(100), nullable=True, index=True)
    tribe = Column(String(50), nullable=True, index=True)
    clan = Column(String(50), nullable=True)
    occupation = Column(String(100), nullable=True)

    membership_status = Column(
        Enum(MembershipStatus, name="membership_status", values_callable=_values),
        nullable=False,
        default=MembershipStatus.active,
        server_default=MembershipStatus.active.value,
        index=True,
    )
    membership_date = Column(Date, nullable=True)
    matrimony_status = Column(
        Enum(MatrimonyStatus, name="matrimony_status", values_callable=_values),
        nullable=False,
        default=MatrimonyStatus.single,
        server_default=MatrimonyStatus.single.value,
    )

    # Summary copies of the sacrament registers; filled only while empty.
    baptism_date = Column(Date, nullable=True, index=True)
    confirmation_date = Column(Date, nullable=True, index=True)
    marriage_date = Column(Date, nullable=True)
    marriage_location = Column(String(100), nullable=True)

    family_id = Column(Integer, ForeignKey("families.id", ondelete="SET NULL"), nullable=True, index=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    family = relationship("Family", back_populates="members", foreign_keys=[family_id])
    sacraments = relationship(
        "Sacrament",
        back_populates="member",
        lazy="selectin",
        order_by="Sacrament.sacrament_date",
    )

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.middle_name, self.last_name) if p)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Member(id={self.id}, name={self.full_name!r}, status={self.membership_status})>"
