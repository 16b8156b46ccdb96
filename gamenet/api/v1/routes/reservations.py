from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from gamenet.db.session import get_db
from gamenet.api.deps import require_roles
from gamenet.core import errors
from gamenet.models.user import User
from gamenet.schemas.booking import ReservationCreate, AvailabilityCheck
from gamenet.services import booking_service

router = APIRouter(tags=["reservations"])

@router.post("/reservations", status_code=201)
def create_reservation(
    body: ReservationCreate,
    db: Session = Depends(get_db),
    me: User = Depends(require_roles("manager", "admin")),
):
    try:
        return booking_service.create_reservation(
            db,
            venue_id=body.organizationId,
            station_id=body.stationId,
            console_id=body.consoleId,
            date_text=body.reservedDate,
            start_text=body.startTime,
            end_text=body.endTime,
            player_count=body.playerCount,
            user_id=body.userId,
            price=body.price,
            notes=body.notes,
        )
    except errors.DomainError as e:
        raise errors.to_http(e)

@router.post("/public/availability/check")
def check_availability(body: AvailabilityCheck, db: Session = Depends(get_db)):
    try:
        return booking_service.check_station_availability(
            db, body.stationId, body.reservedDate, body.startTime, body.endTime
        )
    except errors.DomainError as e:
        raise errors.to_http(e)

@router.get("/public/stations/{station_id}/slots")
def station_slots(station_id: str, date: str, db: Session = Depends(get_db)):
    """Every slot of the venue's opening hours on `date`, flagged free or taken."""
    try:
        return booking_service.station_available_slots(db, station_id, date)
    except errors.DomainError as e:
        raise errors.to_http(e)
