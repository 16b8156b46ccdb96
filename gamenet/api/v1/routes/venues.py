from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from gamenet.db.session import get_db
from gamenet.api.deps import require_roles
from gamenet.core import errors
from gamenet.models.user import User
from gamenet.models.venue import Venue
from gamenet.schemas.venue import WorkingHoursUpdate
from gamenet.services import working_hours_service
from gamenet.services.calendar_service import local_now, to_local

router = APIRouter(tags=["venues"])

@router.get("/venues/{venue_id}/working-hours")
def get_working_hours(venue_id: str, db: Session = Depends(get_db)):
    try:
        return {"workingHours": working_hours_service.get_working_hours(db, venue_id)}
    except errors.DomainError as e:
        raise errors.to_http(e)

@router.put("/venues/{venue_id}/working-hours")
def set_working_hours(
    venue_id: str,
    body: WorkingHoursUpdate,
    db: Session = Depends(get_db),
    me: User = Depends(require_roles("manager", "admin")),
):
    """Replaces the whole week; all 7 days must be present."""
    try:
        entries = [e.model_dump() for e in body.workingHours]
        return {"workingHours": working_hours_service.set_working_hours(db, venue_id, entries)}
    except errors.DomainError as e:
        raise errors.to_http(e)

@router.get("/venues/{venue_id}/is-open")
def is_open(venue_id: str, at: Optional[datetime] = None, db: Session = Depends(get_db)):
    venue = db.get(Venue, venue_id)
    if not venue:
        raise HTTPException(status_code=404, detail="venue not found")
    instant = to_local(at) if at else local_now()
    out = {
        "venueId": venue.id,
        "at": instant.isoformat(),
        "isOpen": working_hours_service.is_open_at(db, venue.id, instant),
    }
    out.update(working_hours_service.summarize_venue(db, venue.id, instant.date()))
    return out
