import logging
import uuid

from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import ProgrammingError, OperationalError

from gamenet.db.session import SessionLocal
from gamenet.core.security import hash_password
from gamenet.models.user import User
from gamenet.models.station import Console, Game, Station, StationPricing, StationGame
from gamenet.models.venue import Venue, WorkingHoursEntry
from gamenet.models.setting import Setting

logger = logging.getLogger(__name__)

CONSOLES = [
    ("PlayStation 5", "Sony", "console"),
    ("Xbox Series X", "Microsoft", "console"),
    ("Gaming PC", None, "pc"),
]
GAMES = ["EA Sports FC 25", "Call of Duty: Warzone", "Mortal Kombat 1"]


def ensure_user(db: Session, phone: str, password: str, role: str, name: str) -> User:
    u = db.query(User).filter(User.phone == phone).first()
    if u:
        return u
    u = User(
        id=str(uuid.uuid4()),
        phone=phone,
        full_name=name,
        role=role,
        password_hash=hash_password(password),
        is_active=True,
    )
    db.add(u)
    db.commit()
    return u


def ensure_console(db: Session, name: str, manufacturer: str | None, category: str) -> Console:
    c = db.query(Console).filter(Console.name == name).first()
    if c:
        return c
    c = Console(id=str(uuid.uuid4()), name=name, manufacturer=manufacturer, category=category)
    db.add(c)
    db.commit()
    return c


def ensure_demo_venue(db: Session, consoles: list[Console], games: list[Game]) -> Venue:
    v = db.query(Venue).filter(Venue.username == "demo-gamenet").first()
    if v:
        return v
    v = Venue(
        id=str(uuid.uuid4()),
        username="demo-gamenet",
        name="Demo Gamenet",
        province="Tehran",
        city="Tehran",
        address="Valiasr St.",
        latitude=35.7219,
        longitude=51.3347,
    )
    db.add(v)
    # Saturday..Thursday 10:00-24:00, closed on Friday
    for day in range(7):
        db.add(WorkingHoursEntry(
            id=str(uuid.uuid4()),
            venue_id=v.id,
            day_of_week=day,
            is_closed=day == 6,
            is_24_hours=False,
            start_time=None if day == 6 else "10:00",
            end_time=None if day == 6 else "24:00",
        ))
    for i, console in enumerate(consoles[:2], start=1):
        s = Station(
            id=str(uuid.uuid4()),
            venue_id=v.id,
            console_id=console.id,
            title=f"Station {i}",
            capacity=2,
            is_active=True,
            is_accepted=True,
        )
        db.add(s)
        db.add(StationPricing(id=str(uuid.uuid4()), station_id=s.id, player_count=1, price=50000))
        db.add(StationPricing(id=str(uuid.uuid4()), station_id=s.id, player_count=2, price=80000))
        for g in games:
            db.add(StationGame(station_id=s.id, game_id=g.id))
    db.commit()
    return v


def run(db=None):
    if db is None:
        db = SessionLocal()
    try:
        # If migrations haven't been applied yet, seeding must not crash the API.
        try:
            db.execute(text("SELECT 1 FROM users LIMIT 1"))
        except (ProgrammingError, OperationalError):
            db.rollback()
            logger.warning("users table not found yet. Skipping seeding (run alembic upgrade head).")
            return

        ensure_user(db, "09120000001", "admin12345", "admin", "Admin")
        ensure_user(db, "09120000002", "manager12345", "manager", "Demo Manager")

        if not db.get(Setting, "TAX_ENABLED"):
            db.add(Setting(key="TAX_ENABLED", int_value=0, str_value=None))
            db.add(Setting(key="TAX_RATE", int_value=None, str_value="10"))
            db.commit()

        consoles = [ensure_console(db, *c) for c in CONSOLES]
        games = db.query(Game).all()
        if not games:
            games = [Game(id=str(uuid.uuid4()), title=t) for t in GAMES]
            db.add_all(games)
            db.commit()
        ensure_demo_venue(db, consoles, games)
        logger.info("seed complete")
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run()
