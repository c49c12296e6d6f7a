"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates the organizers, users, events and enrollments tables, including
the non-negative ticket check and the one-enrollment-per-user-per-event
unique constraint.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

event_status = sa.Enum("pending", "scheduled", "completed", name="eventstatus")


def upgrade() -> None:
    # --- organizers ---
    op.create_table(
        "organizers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("organization_name", sa.String(150), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("venue", sa.String(255), nullable=False),
        sa.Column("when", sa.DateTime(timezone=True), nullable=False),
        sa.Column("available_tickets", sa.Integer, nullable=False, server_default="0"),
        sa.Column("event_status", event_status, nullable=False, server_default="pending"),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("organizer_id", sa.String(36), sa.ForeignKey("organizers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("available_tickets >= 0", name="ck_events_available_tickets_non_negative"),
    )

    # --- enrollments ---
    op.create_table(
        "enrollments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("enrollment_date", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("when_to_remind", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reminder_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("qr_code_scanned", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("checked_in_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "event_id", name="uq_enrollments_user_event"),
    )
    op.create_index("ix_enrollments_user_id", "enrollments", ["user_id"])
    op.create_index("ix_enrollments_event_id", "enrollments", ["event_id"])
    op.create_index("ix_enrollments_when_to_remind", "enrollments", ["when_to_remind"])


def downgrade() -> None:
    op.drop_index("ix_enrollments_when_to_remind", table_name="enrollments")
    op.drop_index("ix_enrollments_event_id", table_name="enrollments")
    op.drop_index("ix_enrollments_user_id", table_name="enrollments")
    op.drop_table("enrollments")
    op.drop_table("events")
    op.drop_table("users")
    op.drop_table("organizers")
    event_status.drop(op.get_bind(), checkfirst=True)
