"""
Revocation of sessions whose payment hold ran out.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from gamenet.models.booking import GameSession, Invoice

logger = logging.getLogger(__name__)


def revoke_expired_sessions(db: Session, now: datetime | None = None) -> dict:
    """
    Move every pending session with expire_at <= now to revoked and its invoice
    to expired, in one transaction. Only rows still pending are touched, so a
    repeated or concurrent run changes nothing further.
    """
    now = now or datetime.now(timezone.utc)
    expired_filter = (
        GameSession.status == "pending",
        GameSession.expire_at <= now,
    )
    try:
        rows = db.execute(select(GameSession.id, GameSession.invoice_id).where(*expired_filter)).all()
        if not rows:
            db.rollback()
            return {"sessionsRevoked": 0, "invoicesExpired": 0}

        session_ids = [r.id for r in rows]
        invoice_ids = [r.invoice_id for r in rows if r.invoice_id]

        revoked = db.execute(
            update(GameSession)
            .where(GameSession.id.in_(session_ids), *expired_filter)
            .values(status="revoked")
            .execution_options(synchronize_session=False)
        ).rowcount
        expired = 0
        if invoice_ids:
            expired = db.execute(
                update(Invoice)
                .where(Invoice.id.in_(invoice_ids), Invoice.status == "not paid")
                .values(status="expired")
                .execution_options(synchronize_session=False)
            ).rowcount
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("revoked %s expired sessions, expired %s invoices", revoked, expired)
    return {"sessionsRevoked": revoked, "invoicesExpired": expired}
