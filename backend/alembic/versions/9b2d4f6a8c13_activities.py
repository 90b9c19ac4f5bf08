"""activities and activity participants

Revision ID: 9b2d4f6a8c13
Revises: 5c1e7a9d2b40
Create Date: 2026-10-19 10:04:55.817342

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '9b2d4f6a8c13'
down_revision: Union[str, Sequence[str], None] = '5c1e7a9d2b40'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ACTIVITY_TYPE = sa.Enum(
    "mass",
    "meeting",
    "event",
    "workshop",
    "retreat",
    "social",
    "fundraising",
    "community_service",
    "youth",
    "choir",
    "prayer",
    "celebration",
    name="activity_type",
)
ACTIVITY_STATUS = sa.Enum("planned", "active", "completed", "cancelled", "postponed", name="activity_status")
PARTICIPANT_ROLE = sa.Enum("participant", "organizer", "leader", "volunteer", name="participant_role")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    ]


def upgrade() -> None:
    op.create_table(
        "activities",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("activity_type", ACTIVITY_TYPE, nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("start_time", sa.Time(), nullable=True),
        sa.Column("end_time", sa.Time(), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("organizer", sa.String(255), nullable=True),
        sa.Column("church_group", sa.String(100), nullable=True),
        sa.Column("max_participants", sa.Integer(), nullable=True),
        sa.Column("registration_required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("registration_deadline", sa.DateTime(), nullable=True),
        sa.Column("status", ACTIVITY_STATUS, nullable=False, server_default="planned"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_activities_id", "activities", ["id"])
    op.create_index("ix_activities_church_group", "activities", ["church_group"])
    op.create_index("ix_activities_type_status", "activities", ["activity_type", "status"])
    op.create_index("ix_activities_start_status", "activities", ["start_date", "status"])
    op.create_index("ix_activities_dates", "activities", ["start_date", "end_date"])

    op.create_table(
        "activity_participants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("activity_id", sa.Integer(), sa.ForeignKey("activities.id", ondelete="CASCADE"), nullable=False),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("members.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "registered_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.text("CURRENT_TIMESTAMP")
        ),
        sa.Column("attended", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("role", PARTICIPANT_ROLE, nullable=False, server_default="participant"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("registered_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("activity_id", "member_id", name="uq_activity_participants_activity_member"),
    )
    op.create_index(
        "ix_activity_participants_activity_attended", "activity_participants", ["activity_id", "attended"]
    )
    op.create_index("ix_activity_participants_member_role", "activity_participants", ["member_id", "role"])


def downgrade() -> None:
    op.drop_table("activity_participants")
    op.drop_table("activities")

    bind = op.get_bind()
    for enum_type in (PARTICIPANT_ROLE, ACTIVITY_STATUS, ACTIVITY_TYPE):
        enum_type.drop(bind, checkfirst=True)
