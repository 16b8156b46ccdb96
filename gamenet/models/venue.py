from sqlalchemy import String, Float, DateTime, Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from gamenet.db.session import Base

class Venue(Base):
    __tablename__ = "organizations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    username: Mapped[str] = mapped_column(String(80), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200))
    province: Mapped[str] = mapped_column(String(80), nullable=True, index=True)
    city: Mapped[str] = mapped_column(String(80), nullable=True, index=True)
    address: Mapped[str] = mapped_column(String(500), default="")
    phone_number: Mapped[str] = mapped_column(String(20), nullable=True)

    # Nullable: venues without coordinates never show up in geo search
    latitude: Mapped[float] = mapped_column(Float, nullable=True, index=True)
    longitude: Mapped[float] = mapped_column(Float, nullable=True, index=True)

    index_image: Mapped[str] = mapped_column(String(512), nullable=True)
    logo_image: Mapped[str] = mapped_column(String(512), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class WorkingHoursEntry(Base):
    __tablename__ = "organization_working_hours"
    __table_args__ = (
        UniqueConstraint("venue_id", "day_of_week", name="uq_working_hours_venue_day"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    venue_id: Mapped[str] = mapped_column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), index=True)
    day_of_week: Mapped[int] = mapped_column(Integer)  # 0=Saturday .. 6=Friday
    is_closed: Mapped[bool] = mapped_column(Boolean, default=False)
    is_24_hours: Mapped[bool] = mapped_column(Boolean, default=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=True)  # HH:MM
    end_time: Mapped[str] = mapped_column(String(5), nullable=True)    # HH:MM
