"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for the Game Night service:
users, games, game_collections, events, event_dates, event_games,
event_participants, date_votes, game_votes, event_final_games,
event_mutations.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

event_status = sa.Enum("draft", "pending", "confirmed", "cancelled", "completed", name="eventstatus")
participant_status = sa.Enum("pending", "interested", "confirmed", "declined", name="participantstatus")
action_type = sa.Enum("create", "invite", "confirm", "cancel", "complete", name="actiontype")


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("catalog_username", sa.String(100), nullable=True),
        sa.Column("default_timezone", sa.String(50), nullable=False, server_default="UTC"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- games ---
    op.create_table(
        "games",
        sa.Column("catalog_id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("thumbnail", sa.String(500), nullable=True),
        sa.Column("min_players", sa.Integer, nullable=False, server_default="1"),
        sa.Column("max_players", sa.Integer, nullable=False, server_default="1"),
        sa.Column("playing_time", sa.Integer, nullable=False, server_default="0"),
        sa.Column("catalog_rating", sa.Float, nullable=True),
        sa.Column("year_published", sa.Integer, nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- game_collections ---
    op.create_table(
        "game_collections",
        sa.Column("collection_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("catalog_id", sa.Integer, sa.ForeignKey("games.catalog_id"), nullable=False),
        sa.Column("user_rating", sa.Float, nullable=True),
        sa.Column("own", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("want_to_play", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("num_plays", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_synced", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "catalog_id", name="uq_collection_user_game"),
    )

    # --- events (final_date_id FK added once event_dates exists) ---
    op.create_table(
        "events",
        sa.Column("event_id", sa.String(36), primary_key=True),
        sa.Column("organizer_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("location", sa.String(500), nullable=True),
        sa.Column("response_deadline", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", event_status, nullable=False, server_default="draft"),
        sa.Column("final_date_id", sa.String(36), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- event_dates ---
    op.create_table(
        "event_dates",
        sa.Column("date_id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id"), nullable=False),
        sa.Column("proposed_date", sa.Date, nullable=False),
        sa.Column("start_time", sa.Time, nullable=True),
        sa.Column("end_time", sa.Time, nullable=True),
    )
    op.create_foreign_key("fk_events_final_date", "events", "event_dates", ["final_date_id"], ["date_id"])

    # --- event_games ---
    op.create_table(
        "event_games",
        sa.Column("event_game_id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id"), nullable=False),
        sa.Column("catalog_id", sa.Integer, sa.ForeignKey("games.catalog_id"), nullable=False),
        sa.Column("proposed_by", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=True),
        sa.Column("is_recommended", sa.Boolean, nullable=False, server_default=sa.false()),
    )

    # --- event_participants ---
    op.create_table(
        "event_participants",
        sa.Column("participant_id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id"), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("status", participant_status, nullable=False, server_default="pending"),
        sa.Column("invitation_token", sa.String(64), nullable=False, unique=True),
        sa.Column("invited_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("event_id", "user_id", name="uq_participant_event_user"),
    )

    # --- date_votes ---
    op.create_table(
        "date_votes",
        sa.Column("vote_id", sa.String(36), primary_key=True),
        sa.Column("participant_id", sa.String(36), sa.ForeignKey("event_participants.participant_id"),
                  nullable=False),
        sa.Column("date_id", sa.String(36), sa.ForeignKey("event_dates.date_id"), nullable=False),
        sa.Column("available", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.UniqueConstraint("participant_id", "date_id", name="uq_date_vote"),
    )

    # --- game_votes ---
    op.create_table(
        "game_votes",
        sa.Column("vote_id", sa.String(36), primary_key=True),
        sa.Column("participant_id", sa.String(36), sa.ForeignKey("event_participants.participant_id"),
                  nullable=False),
        sa.Column("event_game_id", sa.String(36), sa.ForeignKey("event_games.event_game_id"), nullable=False),
        sa.Column("vote", sa.Integer, nullable=False),
        sa.UniqueConstraint("participant_id", "event_game_id", name="uq_game_vote"),
        sa.CheckConstraint("vote IN (-1, 1)", name="ck_game_vote_value"),
    )

    # --- event_final_games ---
    op.create_table(
        "event_final_games",
        sa.Column("final_game_id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id"), nullable=False),
        sa.Column("catalog_id", sa.Integer, sa.ForeignKey("games.catalog_id"), nullable=False),
        sa.Column("responsible_user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
    )

    # --- event_mutations ---
    op.create_table(
        "event_mutations",
        sa.Column("mutation_id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id"), nullable=False),
        sa.Column("actor_user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("action_type", action_type, nullable=False),
        sa.Column("before_snapshot", sa.JSON, nullable=True),
        sa.Column("after_snapshot", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("event_mutations")
    op.drop_table("event_final_games")
    op.drop_table("game_votes")
    op.drop_table("date_votes")
    op.drop_table("event_participants")
    op.drop_table("event_games")
    op.drop_constraint("fk_events_final_date", "events", type_="foreignkey")
    op.drop_table("event_dates")
    op.drop_table("events")
    op.drop_table("game_collections")
    op.drop_table("games")
    op.drop_table("users")
    action_type.drop(op.get_bind(), checkfirst=True)
    participant_status.drop(op.get_bind(), checkfirst=True)
    event_status.drop(op.get_bind(), checkfirst=True)
