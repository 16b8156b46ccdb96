from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from gamenet.db.session import get_db
from gamenet.core import errors
from gamenet.schemas.search import VenueSearchQuery, StationSearchQuery
from gamenet.services.search_service import search_open_venues, search_available_stations

router = APIRouter(tags=["search"])

@router.get("/public/venues/search")
def search_venues(
    latitude: float,
    longitude: float,
    radiusKm: int = 10,
    date: Optional[str] = None,
    startTime: Optional[str] = None,
    endTime: Optional[str] = None,
    province: Optional[str] = None,
    city: Optional[str] = None,
    consoleId: Optional[str] = None,
    gameId: Optional[str] = None,
    playerCount: Optional[int] = None,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
):
    """Nearby venues with at least one matching station, nearest first."""
    q = VenueSearchQuery(
        latitude=latitude, longitude=longitude, radiusKm=radiusKm, date=date,
        startTime=startTime, endTime=endTime, province=province, city=city,
        consoleId=consoleId, gameId=gameId, playerCount=playerCount, limit=limit,
    )
    try:
        return search_open_venues(db, q)
    except errors.DomainError as e:
        raise errors.to_http(e)

@router.get("/public/venues/{username}/stations")
def search_venue_stations(
    username: str,
    date: str,
    startTime: str,
    endTime: str,
    consoleId: str,
    gameId: Optional[str] = None,
    playerCount: Optional[int] = None,
    db: Session = Depends(get_db),
):
    q = StationSearchQuery(
        username=username, date=date, startTime=startTime, endTime=endTime,
        consoleId=consoleId, gameId=gameId, playerCount=playerCount,
    )
    try:
        return search_available_stations(db, q)
    except errors.DomainError as e:
        raise errors.to_http(e)
