from sqlalchemy import String, Integer, DateTime, Date, Boolean, Index, Text, text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, date as date_type, timezone
from gamenet.db.session import Base

# Non-terminal session statuses; these hold their slot.
ACTIVE_SESSION_STATUSES = ("pending", "reserved", "inprogress")

_ACTIVE_SQL = "status IN ('pending', 'reserved', 'inprogress')"


class Reservation(Base):
    """Legacy booking kind. user_id null means the venue blocked the slot itself."""

    __tablename__ = "reservations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=True, index=True)
    venue_id: Mapped[str] = mapped_column(String(36), index=True)
    station_id: Mapped[str] = mapped_column(String(36), index=True)
    console_id: Mapped[str] = mapped_column(String(36))
    player_count: Mapped[int] = mapped_column(Integer, default=1)
    price: Mapped[int] = mapped_column(Integer, default=0)
    invoice_ref: Mapped[str] = mapped_column(String(36), nullable=True)

    is_paid: Mapped[bool] = mapped_column(Boolean, default=False)
    is_accepted: Mapped[bool] = mapped_column(Boolean, default=False)
    is_blocked_by_org: Mapped[bool] = mapped_column(Boolean, default=False)

    # Venue-local wall clock, aligned to the 30 minute grid
    start_time: Mapped[datetime] = mapped_column(DateTime)
    end_time: Mapped[datetime] = mapped_column(DateTime)
    reserved_date: Mapped[date_type] = mapped_column(Date, index=True)
    notes: Mapped[str] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class GameSession(Base):
    __tablename__ = "sessions"
    __table_args__ = (
        # Store-level backstop against double-booking one slot.
        Index(
            "uq_sessions_active_slot",
            "station_id", "date", "start_minutes",
            unique=True,
            sqlite_where=text(_ACTIVE_SQL),
            postgresql_where=text(_ACTIVE_SQL),
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), index=True)
    venue_id: Mapped[str] = mapped_column(String(36), index=True)
    station_id: Mapped[str] = mapped_column(String(36), index=True)

    date: Mapped[date_type] = mapped_column(Date, index=True)
    start_time: Mapped[str] = mapped_column(String(5))  # HH:MM
    end_time: Mapped[str] = mapped_column(String(5))    # HH:MM
    start_minutes: Mapped[int] = mapped_column(Integer)
    end_minutes: Mapped[int] = mapped_column(Integer)
    duration: Mapped[int] = mapped_column(Integer)
    players_count: Mapped[int] = mapped_column(Integer, default=1)

    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)  # pending, reserved, inprogress, completed, revoked
    expire_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    invoice_id: Mapped[str] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class Invoice(Base):
    __tablename__ = "invoices"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), index=True)
    session_id: Mapped[str] = mapped_column(String(36), nullable=True, index=True)
    price: Mapped[int] = mapped_column(Integer)  # total incl. tax
    price_before_tax: Mapped[int] = mapped_column(Integer)
    tax: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(String(20), default="not paid", index=True)  # not paid, paid, expired, cancelled
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    description: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
