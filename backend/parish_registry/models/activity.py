# parish_registry/models/activity.py
"""Parish activities (masses, meetings, retreats, ...) and who takes part in them."""
from __future__ import annotations

import enum

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
    Uuid,
    false,
    func,
)
from sqlalchemy.orm import relationship

from parish_registry.db import Base


def _values(enum_cls):
    return [m.value for m in enum_cls]


class ActivityType(str, enum.Enum):
    mass = "mass"
    meeting = "meeting"
    event = "event"
    workshop = "workshop"
    retreat = "retreat"
    social = "social"
    fundraising = "fundraising"
    community_service = "community_service"
    youth = "youth"
    choir = "choir"
    prayer = "prayer"
    celebration = "celebration"


class ActivityStatus(str, enum.Enum):
    planned = "planned"
    active = "active"
    completed = "completed"
    cancelled = "cancelled"
    postponed = "postponed"


class ParticipantRole(str, enum.Enum):
    participant = "participant"
    organizer = "organizer"
    leader = "leader"
    volunteer = "volunteer"


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    activity_type = Column(Enum(ActivityType, name="activity_type", values_callable=_values), nullable=False)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)

    location = Column(String(255), nullable=True)
    organizer = Column(String(255), nullable=True)
    # Groups are the distinct Member.church_group values, not a table of their own
    church_group = Column(String(100), nullable=True, index=True)

    max_participants = Column(Integer, nullable=True)
    registration_required = Column(Boolean, nullable=False, default=False, server_default=false())
    registration_deadline = Column(DateTime, nullable=True)
    status = Column(
        Enum(ActivityStatus, name="activity_status", values_callable=_values),
        nullable=False,
        default=ActivityStatus.planned,
        server_default=ActivityStatus.planned.value,
    )
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    participants = relationship(
        "ActivityParticipant",
        back_populates="activity",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ActivityParticipant.id",
    )

    __table_args__ = (
        Index("ix_activities_type_status", "activity_type", "status"),
        Index("ix_activities_start_status", "start_date", "status"),
        Index("ix_activities_dates", "start_date", "end_date"),
    )

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    @property
    def attendee_count(self) -> int:
        return sum(1 for p in self.participants if p.attended)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Activity(id={self.id}, title={self.title!r}, start={self.start_date}, status={self.status})>"


class ActivityParticipant(Base):
    """A member registered for an activity; one row per (activity, member)."""
    __tablename__ = "activity_participants"

    id = Column(Integer, primary_key=True)
    activity_id = Column(Integer, ForeignKey("activities.id", ondelete="CASCADE"), nullable=False)
    member_id = Column(Integer, ForeignKey("members.id", ondelete="CASCADE"), nullable=False)
    registered_at = Column(DateTime(timezone=True), nullable=True, server_default=func.now())
    attended = Column(Boolean, nullable=False, default=False, server_default=false())
    role = Column(
        Enum(ParticipantRole, name="participant_role", values_callable=_values),
        nullable=False,
        default=ParticipantRole.participant,
        server_default=ParticipantRole.participant.value,
    )
    notes = Column(Text, nullable=True)
    registered_by = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    activity = relationship("Activity", back_populates="participants")
    member = relationship("Member", lazy="joined")

    __table_args__ = (
        UniqueConstraint("activity_id", "member_id", name="uq_activity_participants_activity_member"),
        Index("ix_activity_participants_activity_attended", "activity_id", "attended"),
        Index("ix_activity_participants_member_role", "member_id", "role"),
    )

    @property
    def member_name(self) -> str | None:
        return self.member.full_name if self.member is not None else None
