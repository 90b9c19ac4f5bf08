# parish_registry/schemas/activity.py
from __future__ import annotations

from datetime import date, datetime, time
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, constr, model_validator

from parish_registry.models.activity import ActivityStatus, ActivityType, ParticipantRole

Text255 = constr(strip_whitespace=True, max_length=255)


class _ActivitySchedule(BaseModel):
    @model_validator(mode="after")
    def check_schedule(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.start_date and self.registration_deadline and self.registration_deadline.date() > self.start_date:
            raise ValueError("registration_deadline must be on or before start_date")
        return self


class ActivityBase(_ActivitySchedule):
    title: constr(strip_whitespace=True, min_length=1, max_length=255)
    description: Optional[str] = None
    activity_type: ActivityType
    start_date: date
    end_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[Text255] = None
    organizer: Optional[Text255] = None
    church_group: Optional[constr(strip_whitespace=True, max_length=100)] = None
    max_participants: Optional[int] = Field(None, ge=1)
    registration_required: bool = False
    registration_deadline: Optional[datetime] = None
    status: ActivityStatus = ActivityStatus.planned
    notes: Optional[str] = None


class ActivityCreate(ActivityBase):
    pass


class ActivityUpdate(_ActivitySchedule):
    title: Optional[constr(strip_whitespace=True, min_length=1, max_length=255)] = None
    description: Optional[str] = None
    activity_type: Optional[ActivityType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[Text255] = None
    organizer: Optional[Text255] = None
    church_group: Optional[str] = None
    max_participants: Optional[int] = Field(None, ge=1)
    registration_required: Optional[bool] = None
    registration_deadline: Optional[datetime] = None
    status: Optional[ActivityStatus] = None
    notes: Optional[str] = None


class ActivityRead(ActivityBase):
    id: int
    participant_count: int = 0
    attendee_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ParticipantCreate(BaseModel):
    member_id: int
    role: ParticipantRole = ParticipantRole.participant
    attended: bool = False
    notes: Optional[str] = None


class ParticipantUpdate(BaseModel):
    role: Optional[ParticipantRole] = None
    attended: Optional[bool] = None
    notes: Optional[str] = None


class ParticipantRead(BaseModel):
    id: int
    activity_id: int
    member_id: int
    member_name: Optional[str] = None
    role: ParticipantRole
    attended: bool
    notes: Optional[str] = None
    registered_at: Optional[datetime] = None
    registered_by: Optional[UUID] = None

    model_config = ConfigDict(from_attributes=True)


class ActivityDetail(ActivityRead):
    participants: List[ParticipantRead] = []


class ActivityPage(BaseModel):
    total: int
    items: List[ActivityRead]


class BulkDelete(BaseModel):
    activity_ids: List[int] = Field(..., min_length=1)
