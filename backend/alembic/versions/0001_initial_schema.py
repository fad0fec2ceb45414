"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for the EventHub attendance service:
users, events, event_guests, event_toggles, reservations, notifications.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum("user", "admin", name="userrole")
event_type = sa.Enum(
    "clubbing", "rave", "birthday", "wedding", "food", "sport", "meeting", "conference", "other",
    name="eventtype",
)
visibility = sa.Enum("public", "private", name="visibility")
guest_rsvp = sa.Enum("yes", "no", "maybe", "pending", name="guestrsvp")
guest_source = sa.Enum("direct", "reservation", name="guestsource")
toggle_field = sa.Enum("likes", "going", "interested", name="togglefield")
reservation_status = sa.Enum("pending", "confirmed", "rejected", "canceled", name="reservationstatus")
notification_type = sa.Enum(
    "reservation_request", "reservation_update", "reservation_cancellation", "reservation_response",
    "like", "guest_invitation", "guest_response",
    name="notificationtype",
)

ACTIVE_RESERVATION = sa.text("status IN ('pending', 'confirmed')")


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("display_name", sa.String(100), nullable=False, unique=True),
        sa.Column("role", user_role, nullable=False, server_default="user"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("event_id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("location", sa.String(500), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("event_type", event_type, nullable=False, server_default="other"),
        sa.Column("visibility", visibility, nullable=False, server_default="private"),
        sa.Column("price", sa.Float, nullable=False, server_default="0"),
        sa.Column("created_by", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("deleted", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_archived", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- event_guests ---
    op.create_table(
        "event_guests",
        sa.Column("guest_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id"), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("rsvp", guest_rsvp, nullable=False, server_default="maybe"),
        sa.Column("label", sa.String(120), nullable=True),
        sa.Column("party_size", sa.Integer, nullable=False, server_default="1"),
        sa.Column("source", guest_source, nullable=False, server_default="direct"),
        sa.Column("responded_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("event_id", "user_id", name="uq_event_guest_user"),
    )

    # --- event_toggles ---
    op.create_table(
        "event_toggles",
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id"), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), primary_key=True),
        sa.Column("field", toggle_field, primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- reservations ---
    op.create_table(
        "reservations",
        sa.Column("reservation_id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id"), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("number_of_people", sa.Integer, nullable=False),
        sa.Column("status", reservation_status, nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(
        "uq_active_reservation",
        "reservations",
        ["event_id", "user_id"],
        unique=True,
        sqlite_where=ACTIVE_RESERVATION,
        postgresql_where=ACTIVE_RESERVATION,
    )

    # --- notifications ---
    op.create_table(
        "notifications",
        sa.Column("notification_id", sa.String(36), primary_key=True),
        sa.Column("recipient_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("sender_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id"), nullable=True),
        sa.Column("type", notification_type, nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_notifications_recipient_id", "notifications", ["recipient_id"])


def downgrade() -> None:
    op.drop_index("ix_notifications_recipient_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("uq_active_reservation", table_name="reservations")
    op.drop_table("reservations")
    op.drop_table("event_toggles")
    op.drop_table("event_guests")
    op.drop_table("events")
    op.drop_table("users")
