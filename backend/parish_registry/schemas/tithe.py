from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, constr

from parish_registry.models.tithe import PaymentMethod, TitheType


class TitheBase(BaseModel):
    member_id: int
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    tithe_type: TitheType = TitheType.tithe
    payment_method: PaymentMethod = PaymentMethod.cash
    date_given: date
    purpose: constr(strip_whitespace=True, max_length=255) | None = None
    receipt_number: constr(strip_whitespace=True, max_length=100) | None = None
    reference_number: constr(strip_whitespace=True, max_length=100) | None = None
    notes: str | None = None


class TitheCreate(TitheBase):
    pass


class TitheOut(TitheBase):
    id: int
    recorded_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
