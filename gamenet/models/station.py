from sqlalchemy import String, Integer, DateTime, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from gamenet.db.session import Base

class Console(Base):
    __tablename__ = "consoles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(120), unique=True)
    manufacturer: Mapped[str] = mapped_column(String(120), nullable=True)
    category: Mapped[str] = mapped_column(String(30), default="console")  # console, pc, vr
    deleted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)


class Game(Base):
    __tablename__ = "games"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(String(200), index=True)
    cover_image: Mapped[str] = mapped_column(String(512), nullable=True)


class Station(Base):
    __tablename__ = "stations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    venue_id: Mapped[str] = mapped_column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), index=True)
    console_id: Mapped[str] = mapped_column(String(36), ForeignKey("consoles.id"), index=True)
    title: Mapped[str] = mapped_column(String(120))
    capacity: Mapped[int] = mapped_column(Integer, default=1)
    status: Mapped[str] = mapped_column(String(30), default="available")  # display only

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_accepted: Mapped[bool] = mapped_column(Boolean, default=False)
    deleted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class StationPricing(Base):
    __tablename__ = "station_pricings"
    __table_args__ = (
        UniqueConstraint("station_id", "player_count", name="uq_station_pricing_players"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    station_id: Mapped[str] = mapped_column(String(36), ForeignKey("stations.id", ondelete="CASCADE"), index=True)
    player_count: Mapped[int] = mapped_column(Integer)
    price: Mapped[int] = mapped_column(Integer)  # hourly rate for this headcount


class StationGame(Base):
    __tablename__ = "station_games"

    station_id: Mapped[str] = mapped_column(String(36), ForeignKey("stations.id", ondelete="CASCADE"), primary_key=True)
    game_id: Mapped[str] = mapped_column(String(36), ForeignKey("games.id", ondelete="CASCADE"), primary_key=True)
