from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from parish_registry.db import Base


class Family(Base):
    __tablename__ = "families"

    id = Column(Integer, primary_key=True, index=True)
    family_name = Column(String(255), nullable=False, index=True)
    family_code = Column(String(50), nullable=True, unique=True)
    address = Column(Text, nullable=True)
    phone = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    deanery = Column(String(100), nullable=True)
    parish = Column(String(100), nullable=True)

    # use_alter: families <-> members reference each other
    head_of_family_id = Column(
        Integer,
        ForeignKey("members.id", ondelete="SET NULL", use_alter=True, name="fk_families_head_member"),
        nullable=True,
    )

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    members = relationship(
        "Member",
        back_populates="family",
        foreign_keys="Member.family_id",
        lazy="selectin",
    )
    head_of_family = relationship("Member", foreign_keys=[head_of_family_id], post_update=True)
