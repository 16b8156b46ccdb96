"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

ACTIVE_SESSIONS = "status IN ('pending', 'reserved', 'inprogress')"


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("role", sa.String(length=30), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_phone", "users", ["phone"], unique=True)
    op.create_index("ix_users_role", "users", ["role"], unique=False)

    op.create_table(
        "organizations",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("username", sa.String(length=80), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("province", sa.String(length=80), nullable=True),
        sa.Column("city", sa.String(length=80), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("phone_number", sa.String(length=20), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("index_image", sa.String(length=512), nullable=True),
        sa.Column("logo_image", sa.String(length=512), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_organizations_username", "organizations", ["username"], unique=True)
    op.create_index("ix_organizations_province", "organizations", ["province"])
    op.create_index("ix_organizations_city", "organizations", ["city"])
    op.create_index("ix_organizations_latitude", "organizations", ["latitude"])
    op.create_index("ix_organizations_longitude", "organizations", ["longitude"])

    op.create_table(
        "organization_working_hours",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("venue_id", sa.String(length=36), sa.ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("is_closed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_24_hours", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("start_time", sa.String(length=5), nullable=True),
        sa.Column("end_time", sa.String(length=5), nullable=True),
        sa.UniqueConstraint("venue_id", "day_of_week", name="uq_working_hours_venue_day"),
    )
    op.create_index("ix_organization_working_hours_venue_id", "organization_working_hours", ["venue_id"])

    op.create_table(
        "consoles",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False, unique=True),
        sa.Column("manufacturer", sa.String(length=120), nullable=True),
        sa.Column("category", sa.String(length=30), nullable=False, server_default="console"),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "games",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("cover_image", sa.String(length=512), nullable=True),
    )
    op.create_index("ix_games_title", "games", ["title"])

    op.create_table(
        "stations",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("venue_id", sa.String(length=36), sa.ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("console_id", sa.String(length=36), sa.ForeignKey("consoles.id"), nullable=False),
        sa.Column("title", sa.String(length=120), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="available"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("is_accepted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("capacity >= 1", name="ck_stations_capacity"),
    )
    op.create_index("ix_stations_venue_id", "stations", ["venue_id"])
    op.create_index("ix_stations_console_id", "stations", ["console_id"])

    op.create_table(
        "station_pricings",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("station_id", sa.String(length=36), sa.ForeignKey("stations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("player_count", sa.Integer(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.UniqueConstraint("station_id", "player_count", name="uq_station_pricing_players"),
        sa.CheckConstraint("price >= 0", name="ck_station_pricings_price"),
    )
    op.create_index("ix_station_pricings_station_id", "station_pricings", ["station_id"])

    op.create_table(
        "station_games",
        sa.Column("station_id", sa.String(length=36), sa.ForeignKey("stations.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("game_id", sa.String(length=36), sa.ForeignKey("games.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "reservations",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("venue_id", sa.String(length=36), nullable=False),
        sa.Column("station_id", sa.String(length=36), nullable=False),
        sa.Column("console_id", sa.String(length=36), nullable=False),
        sa.Column("player_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("price", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("invoice_ref", sa.String(length=36), nullable=True),
        sa.Column("is_paid", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_accepted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_blocked_by_org", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column("reserved_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_reservations_user_id", "reservations", ["user_id"])
    op.create_index("ix_reservations_venue_id", "reservations", ["venue_id"])
    op.create_index("ix_reservations_station_id", "reservations", ["station_id"])
    op.create_index("ix_reservations_reserved_date", "reservations", ["reserved_date"])

    op.create_table(
        "sessions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("venue_id", sa.String(length=36), nullable=False),
        sa.Column("station_id", sa.String(length=36), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("start_minutes", sa.Integer(), nullable=False),
        sa.Column("end_minutes", sa.Integer(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("players_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("expire_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("invoice_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_sessions_user_id", "sessions", ["user_id"])
    op.create_index("ix_sessions_venue_id", "sessions", ["venue_id"])
    op.create_index("ix_sessions_station_id", "sessions", ["station_id"])
    op.create_index("ix_sessions_date", "sessions", ["date"])
    op.create_index("ix_sessions_status", "sessions", ["status"])
    op.create_index("ix_sessions_expire_at", "sessions", ["expire_at"])
    op.create_index(
        "uq_sessions_active_slot",
        "sessions",
        ["station_id", "date", "start_minutes"],
        unique=True,
        postgresql_where=sa.text(ACTIVE_SESSIONS),
        sqlite_where=sa.text(ACTIVE_SESSIONS),
    )

    op.create_table(
        "invoices",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("session_id", sa.String(length=36), nullable=True),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("price_before_tax", sa.Integer(), nullable=False),
        sa.Column("tax", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="not paid"),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_invoices_user_id", "invoices", ["user_id"])
    op.create_index("ix_invoices_session_id", "invoices", ["session_id"])
    op.create_index("ix_invoices_status", "invoices", ["status"])

    op.create_table(
        "settings",
        sa.Column("key", sa.String(length=80), primary_key=True),
        sa.Column("int_value", sa.Integer(), nullable=True),
        sa.Column("str_value", sa.String(length=255), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("settings")
    op.drop_table("invoices")
    op.drop_index("uq_sessions_active_slot", table_name="sessions")
    op.drop_table("sessions")
    op.drop_table("reservations")
    op.drop_table("station_games")
    op.drop_table("station_pricings")
    op.drop_table("stations")
    op.drop_table("games")
    op.drop_table("consoles")
    op.drop_table("organization_working_hours")
    op.drop_table("organizations")
    op.drop_table("users")
