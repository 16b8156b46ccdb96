import uuid
from datetime import date, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gamenet.core.security import create_access_token
from gamenet.db.session import Base, get_db
from gamenet.main import app
from gamenet.models.booking import GameSession, Invoice, Reservation
from gamenet.models.setting import Setting
from gamenet.models.station import Console, Game, Station, StationGame, StationPricing
from gamenet.models.user import User
from gamenet.models.venue import Venue, WorkingHoursEntry

# Far enough ahead that no "not in the past" check can trip, whatever the local timezone.
FUTURE = date.today() + timedelta(days=30)


def _id() -> str:
    return str(uuid.uuid4())


class Factory:
    def __init__(self, db):
        self.db = db

    def user(self, role: str = "customer", phone: str | None = None) -> User:
        u = User(id=_id(), phone=phone or uuid.uuid4().hex[:11], full_name=role.title(), role=role, is_active=True)
        self.db.add(u)
        self.db.commit()
        return u

    def venue(self, lat: float | None = 35.70, lon: float | None = 51.40, username: str | None = None, **kw) -> Venue:
        v = Venue(
            id=_id(),
            username=username or f"venue-{uuid.uuid4().hex[:8]}",
            name=kw.pop("name", "Test Gamenet"),
            latitude=lat,
            longitude=lon,
            **kw,
        )
        self.db.add(v)
        self.db.commit()
        return v

    def hours(self, venue: Venue, days=range(7), start: str | None = None, end: str | None = None,
              closed: bool = False, all_day: bool = False) -> None:
        for day in days:
            self.db.add(WorkingHoursEntry(
                id=_id(),
                venue_id=venue.id,
                day_of_week=day,
                is_closed=closed,
                is_24_hours=all_day,
                start_time=start,
                end_time=end,
            ))
        self.db.commit()

    def console(self, name: str | None = None, category: str = "console") -> Console:
        c = Console(id=_id(), name=name or f"Console {uuid.uuid4().hex[:6]}", category=category)
        self.db.add(c)
        self.db.commit()
        return c

    def game(self, title: str = "EA Sports FC 25") -> Game:
        g = Game(id=_id(), title=title)
        self.db.add(g)
        self.db.commit()
        return g

    def station(self, venue: Venue, console: Console | None = None, capacity: int = 2,
                prices: dict | None = None, games=(), **kw) -> Station:
        console = console or self.console()
        s = Station(
            id=_id(),
            venue_id=venue.id,
            console_id=console.id,
            title=kw.pop("title", "Station 1"),
            capacity=capacity,
            is_active=kw.pop("is_active", True),
            is_accepted=kw.pop("is_accepted", True),
            **kw,
        )
        self.db.add(s)
        for players, price in (prices if prices is not None else {1: 50000, 2: 80000}).items():
            self.db.add(StationPricing(id=_id(), station_id=s.id, player_count=players, price=price))
        for g in games:
            self.db.add(StationGame(station_id=s.id, game_id=g.id))
        self.db.commit()
        return s

    def session(self, station: Station, day: date = FUTURE, start: int = 600, status: str = "pending",
                expire_at: datetime | None = None, user_id: str | None = None) -> GameSession:
        invoice_id = _id()
        s = GameSession(
            id=_id(),
            user_id=user_id or _id(),
            venue_id=station.venue_id,
            station_id=station.id,
            date=day,
            start_time=f"{start // 60:02d}:{start % 60:02d}",
            end_time=f"{(start + 30) // 60:02d}:{(start + 30) % 60:02d}",
            start_minutes=start,
            end_minutes=start + 30,
            duration=30,
            players_count=1,
            status=status,
            expire_at=expire_at or datetime.now() + timedelta(minutes=10),
            invoice_id=invoice_id,
        )
        self.db.add(Invoice(
            id=invoice_id,
            user_id=s.user_id,
            session_id=s.id,
            price=25000,
            price_before_tax=25000,
            tax=0,
            status="not paid",
            due_date=s.expire_at,
        ))
        self.db.add(s)
        self.db.commit()
        return s

    def reservation(self, station: Station, day: date = FUTURE, start: int = 600, end: int | None = None,
                    user_id: str | None = None) -> Reservation:
        midnight = datetime(day.year, day.month, day.day)
        r = Reservation(
            id=_id(),
            user_id=user_id,
            venue_id=station.venue_id,
            station_id=station.id,
            console_id=station.console_id,
            player_count=1,
            price=50000,
            is_paid=user_id is None,
            is_accepted=user_id is None,
            is_blocked_by_org=user_id is None,
            start_time=midnight + timedelta(minutes=start),
            end_time=midnight + timedelta(minutes=end if end is not None else start + 30),
            reserved_date=day,
        )
        self.db.add(r)
        self.db.commit()
        return r

    def tax(self, enabled: bool, rate: str) -> None:
        self.db.add(Setting(key="TAX_ENABLED", int_value=1 if enabled else 0))
        self.db.add(Setting(key="TAX_RATE", str_value=rate))
        self.db.commit()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    s = session_factory()
    yield s
    s.close()


@pytest.fixture
def make(db):
    return Factory(db)


@pytest.fixture
def client(db):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}
    return _headers


@pytest.fixture
def file_session_factory(tmp_path):
    # Separate connections per thread; in-memory StaticPool would share one
    engine = create_engine(f"sqlite:///{tmp_path / 'gamenet.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def file_make(file_session_factory):
    s = file_session_factory()
    yield Factory(s)
    s.close()
