"""
Customer-facing search.

Everything a search needs is loaded in a handful of bulk queries keyed by the
candidate venue and station id sets; slot computation and the optional
console/game/headcount filters then run in memory.
"""
import logging
import time
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy import select
from sqlalchemy.orm import Session

from gamenet.core import errors
from gamenet.core.config import settings
from gamenet.models.station import Console, Game, Station, StationGame, StationPricing
from gamenet.models.venue import Venue
from gamenet.schemas.search import StationSearchQuery, VenueSearchQuery
from gamenet.services.calendar_service import (
    at_minutes,
    local_day_of_week,
    local_now,
    parse_hhmm,
    parse_local_date,
)
from gamenet.services.geo import find_nearby_venues
from gamenet.services.slots.availability import (
    annotate_slots,
    decompose_range,
    is_range_free,
    occupied_ranges,
)
from gamenet.services.slots.generator import generate_day_slots
from gamenet.services.working_hours_service import DayHours, day_hours_batch, summarize, week_hours_batch

logger = logging.getLogger(__name__)

ALLOWED_RADII_KM = (5, 10, 15, 20, 25, 30)
MAX_PLAYER_COUNT = 20


@dataclass
class StationView:
    station: Station
    console: Console
    pricings: list[StationPricing] = field(default_factory=list)
    games: list[Game] = field(default_factory=list)

    @property
    def game_ids(self) -> set[str]:
        return {g.id for g in self.games}


StationPredicate = Callable[[StationView], bool]


def station_predicates(
    console_id: str | None = None,
    game_id: str | None = None,
    player_count: int | None = None,
) -> list[StationPredicate]:
    """Only the filters actually requested end up in the list."""
    predicates: list[StationPredicate] = []
    if console_id:
        predicates.append(lambda v: v.station.console_id == console_id)
    if game_id:
        predicates.append(lambda v: game_id in v.game_ids)
    if player_count:
        predicates.append(lambda v: v.station.capacity >= player_count)
    return predicates


def _load_station_views(db: Session, venue_ids: list[str]) -> dict[str, list[StationView]]:
    """Bookable stations with console, pricing and games for every venue in one pass."""
    by_venue: dict[str, list[StationView]] = defaultdict(list)
    if not venue_ids:
        return by_venue

    rows = db.execute(
        select(Station, Console)
        .join(Console, Console.id == Station.console_id)
        .where(
            Station.venue_id.in_(venue_ids),
            Station.is_active == True,
            Station.is_accepted == True,
            Station.deleted_at.is_(None),
            Console.deleted_at.is_(None),
        )
        .order_by(Station.title)
    ).all()
    views = {station.id: StationView(station, console) for station, console in rows}
    if not views:
        return by_venue

    ids = list(views)
    for tier in db.execute(
        select(StationPricing)
        .where(StationPricing.station_id.in_(ids))
        .order_by(StationPricing.player_count)
    ).scalars():
        views[tier.station_id].pricings.append(tier)

    for station_id, game in db.execute(
        select(StationGame.station_id, Game)
        .join(Game, Game.id == StationGame.game_id)
        .where(StationGame.station_id.in_(ids))
        .order_by(Game.title)
    ).all():
        views[station_id].games.append(game)

    for view in views.values():
        by_venue[view.station.venue_id].append(view)
    return by_venue


def _pricings_out(view: StationView, player_count: int | None) -> list[dict]:
    tiers = view.pricings
    if player_count:
        tiers = [t for t in tiers if t.player_count == player_count]
    return [{"playerCount": t.player_count, "price": t.price} for t in tiers]


def _games_out(view: StationView) -> list[dict]:
    return [{"id": g.id, "title": g.title, "coverImage": g.cover_image} for g in view.games]


def _parse_window(start_text: str | None, end_text: str | None) -> tuple[int, int] | None:
    if not start_text and not end_text:
        return None
    if not start_text or not end_text:
        raise errors.ValidationError("startTime and endTime must be given together")
    start_min, end_min = parse_hhmm(start_text), parse_hhmm(end_text, end_of_day=True)
    if start_min >= end_min:
        raise errors.ValidationError("startTime must be before endTime")
    if not decompose_range(start_min, end_min):
        raise errors.ValidationError("times must align to 30 minute slots", code="invalid_slot")
    return start_min, end_min


def _validate_venue_query(q: VenueSearchQuery) -> None:
    if not -90 <= q.latitude <= 90 or not -180 <= q.longitude <= 180:
        raise errors.ValidationError("latitude/longitude out of range")
    if q.radiusKm not in ALLOWED_RADII_KM:
        raise errors.ValidationError(f"radiusKm must be one of {', '.join(map(str, ALLOWED_RADII_KM))}")
    if q.playerCount is not None and not 1 <= q.playerCount <= MAX_PLAYER_COUNT:
        raise errors.ValidationError(f"playerCount must be between 1 and {MAX_PLAYER_COUNT}")
    if (q.startTime or q.endTime) and not q.date:
        raise errors.ValidationError("date is required when filtering by time")
    if q.limit is not None and not 1 <= q.limit <= settings.MAX_SEARCH_LIMIT:
        raise errors.ValidationError(f"limit must be between 1 and {settings.MAX_SEARCH_LIMIT}")


def search_open_venues(db: Session, q: VenueSearchQuery, now: datetime | None = None) -> dict:
    started = time.perf_counter()
    _validate_venue_query(q)
    window = _parse_window(q.startTime, q.endTime)
    day = parse_local_date(q.date) if q.date else (now or local_now()).date()

    nearby = find_nearby_venues(db, q.latitude, q.longitude, q.radiusKm, province=q.province, city=q.city)
    venue_ids = [venue.id for venue, _ in nearby]
    views_by_venue = _load_station_views(db, venue_ids)
    station_ids = [v.station.id for views in views_by_venue.values() for v in views]
    occupied = occupied_ranges(db, station_ids, day)
    today_entries = day_hours_batch(db, venue_ids, local_day_of_week(day))
    week_entries = week_hours_batch(db, venue_ids)
    predicates = station_predicates(q.consoleId, q.gameId, q.playerCount)

    organizations = []
    for venue, distance_km in nearby:
        hours = DayHours.from_entry(today_entries.get(venue.id))
        if window:
            is_open = hours.is_open_at_minute(window[0])
            if not is_open:
                continue
        else:
            is_open = not hours.is_closed

        venue_views = views_by_venue.get(venue.id, [])
        slots = generate_day_slots(day, hours.open_interval)
        stations_out = []
        for view in venue_views:
            if not all(p(view) for p in predicates):
                continue
            occ = occupied.get(view.station.id, [])
            if window and not is_range_free(occ, window[0], window[1], slots):
                continue
            stations_out.append({
                "id": view.station.id,
                "title": view.station.title,
                "consoleId": view.console.id,
                "consoleName": view.console.name,
                "capacity": view.station.capacity,
                "pricings": _pricings_out(view, q.playerCount),
                "games": _games_out(view),
                "availableSlots": [
                    {"startTime": st.slot.start_time, "endTime": st.slot.end_time, "label": st.slot.label}
                    for st in annotate_slots(slots, occ)
                    if st.is_free
                ],
            })
        if not stations_out:
            continue

        consoles = {}
        for view in venue_views:
            consoles.setdefault(view.console.id, {
                "id": view.console.id,
                "name": view.console.name,
                "category": view.console.category,
            })
        org = {
            "id": venue.id,
            "username": venue.username,
            "name": venue.name,
            "province": venue.province,
            "city": venue.city,
            "address": venue.address,
            "latitude": venue.latitude,
            "longitude": venue.longitude,
            "logoImage": venue.logo_image,
            "indexImage": venue.index_image,
            "distance": round(distance_km, 2),
            "distanceMeters": round(distance_km * 1000),
            "distanceUnit": "km",
            "isOpen": is_open,
            "consoles": list(consoles.values()),
            "stations": stations_out,
        }
        org.update(summarize(week_entries.get(venue.id, []), day))
        organizations.append(org)

    if not window:
        # Stable sort keeps distance order within each group
        organizations.sort(key=lambda o: not o["isOpen"])
    total = len(organizations)
    if q.limit:
        organizations = organizations[:q.limit]

    logger.info(
        "venue search radius=%skm candidates=%s results=%s in %.1fms",
        q.radiusKm, len(nearby), len(organizations), (time.perf_counter() - started) * 1000,
    )
    return {"organizations": organizations, "meta": {"total": total}}


def search_available_stations(db: Session, q: StationSearchQuery, now: datetime | None = None) -> dict:
    started = time.perf_counter()
    day = parse_local_date(q.date)
    window = _parse_window(q.startTime, q.endTime)
    if window is None:
        raise errors.ValidationError("startTime and endTime are required")
    start_min, end_min = window
    if q.playerCount is not None and not 1 <= q.playerCount <= MAX_PLAYER_COUNT:
        raise errors.ValidationError(f"playerCount must be between 1 and {MAX_PLAYER_COUNT}")
    now = now or local_now()
    if at_minutes(day, start_min) < now - timedelta(minutes=settings.SEARCH_PAST_TOLERANCE_MINUTES):
        raise errors.ValidationError("cannot search for a time in the past", code="past_time")

    venue = db.execute(select(Venue).where(Venue.username == q.username)).scalar_one_or_none()
    if not venue:
        raise errors.NotFoundError("venue not found")

    views = _load_station_views(db, [venue.id]).get(venue.id, [])
    predicates = station_predicates(q.consoleId, q.gameId, q.playerCount)
    views = [v for v in views if all(p(v) for p in predicates)]
    occupied = occupied_ranges(db, [v.station.id for v in views], day)
    hours = DayHours.from_entry(day_hours_batch(db, [venue.id], local_day_of_week(day)).get(venue.id))
    slots = generate_day_slots(day, hours.open_interval)

    stations = []
    for view in views:
        if not is_range_free(occupied.get(view.station.id, []), start_min, end_min, slots):
            continue
        stations.append({
            "id": view.station.id,
            "title": view.station.title,
            "consoleId": view.console.id,
            "consoleName": view.console.name,
            "consoleCategory": view.console.category,
            "capacity": view.station.capacity,
            "status": view.station.status,
            "isAvailable": True,
            "pricings": _pricings_out(view, q.playerCount),
            "games": _games_out(view),
        })

    logger.info(
        "station search venue=%s date=%s %s-%s results=%s in %.1fms",
        q.username, day, q.startTime, q.endTime, len(stations), (time.perf_counter() - started) * 1000,
    )
    return {
        "stations": stations,
        "meta": {
            "total": len(stations),
            "searchParams": {
                "username": q.username,
                "date": day.isoformat(),
                "startTime": q.startTime,
                "endTime": q.endTime,
                "consoleId": q.consoleId,
                "gameId": q.gameId,
                "playerCount": q.playerCount,
            },
        },
    }
