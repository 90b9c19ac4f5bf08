from __future__ import annotations

import enum

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Enum, ForeignKey, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from parish_registry.db import Base


class TitheType(str, enum.Enum):
    tithe = "tithe"
    offering = "offering"
    special_collection = "special_collection"
    donation = "donation"
    thanksgiving = "thanksgiving"
    project_contribution = "project_contribution"


class PaymentMethod(str, enum.Enum):
    cash = "cash"
    check = "check"
    mobile_money = "mobile_money"
    bank_transfer = "bank_transfer"
    card = "card"


class Tithe(Base):
    __tablename__ = "tithes"

    id = Column(Integer, primary_key=True)
    member_id = Column(Integer, ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True)

    amount = Column(Numeric(10, 2), nullable=False)
    tithe_type = Column(Enum(TitheType, name="tithe_type", values_callable=lambda e: [m.value for m in e]), nullable=False)
    payment_method = Column(
        Enum(PaymentMethod, name="tithe_payment_method", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
    )
    date_given = Column(Date, nullable=False, index=True)

    purpose = Column(String(255), nullable=True)
    receipt_number = Column(String(100), nullable=True, index=True)
    reference_number = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    recorded_by = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    member = relationship("Member")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_tithes_amount_positive"),
        Index("ix_tithes_member_date", "member_id", "date_given"),
        Index("ix_tithes_type_date", "tithe_type", "date_given"),
    )
