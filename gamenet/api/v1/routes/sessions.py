from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from gamenet.db.session import get_db
from gamenet.api.deps import get_current_user
from gamenet.core import errors
from gamenet.models.user import User
from gamenet.schemas.booking import SessionCreate, SessionCreatedOut, SessionPreviewOut
from gamenet.services import booking_service

router = APIRouter(tags=["sessions"])

@router.post("/sessions/preview", response_model=SessionPreviewOut)
def preview_session(body: SessionCreate, db: Session = Depends(get_db)):
    """Pricing breakdown and availability for a slot. Nothing is held."""
    try:
        return booking_service.preview_session(
            db, body.stationId, body.date, body.startTime, body.endTime, body.playersCount
        )
    except errors.DomainError as e:
        raise errors.to_http(e)

@router.post("/sessions", response_model=SessionCreatedOut, status_code=201)
def create_session(body: SessionCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    try:
        return booking_service.create_session(
            db, user.id, body.stationId, body.date, body.startTime, body.endTime, body.playersCount
        )
    except errors.DomainError as e:
        raise errors.to_http(e)

@router.get("/sessions/{session_id}")
def get_session(session_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    try:
        return booking_service.get_session(db, session_id, user.id)
    except errors.DomainError as e:
        raise errors.to_http(e)

@router.post("/sessions/{session_id}/cancel")
def cancel_session(session_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    try:
        return booking_service.cancel_session(db, session_id, user.id)
    except errors.DomainError as e:
        raise errors.to_http(e)
