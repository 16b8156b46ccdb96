from pydantic import BaseModel
from typing import Optional

class VenueSearchQuery(BaseModel):
    latitude: float
    longitude: float
    radiusKm: int = 10
    date: Optional[str] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    province: Optional[str] = None
    city: Optional[str] = None
    consoleId: Optional[str] = None
    gameId: Optional[str] = None
    playerCount: Optional[int] = None
    limit: Optional[int] = None

class StationSearchQuery(BaseModel):
    username: str
    date: str
    startTime: str
    endTime: str
    consoleId: str
    gameId: Optional[str] = None
    playerCount: Optional[int] = None
