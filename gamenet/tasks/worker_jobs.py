import logging
import threading
import time

from sqlalchemy.orm import Session

from gamenet.db.session import SessionLocal
from gamenet.services.expiry_service import revoke_expired_sessions

logger = logging.getLogger(__name__)

# Single-flight guard for this process. Runs in other processes are harmless:
# the revocation only touches rows that are still pending.
_expire_lock = threading.Lock()


def expire_sessions() -> dict:
    if not _expire_lock.acquire(blocking=False):
        logger.info("expire_sessions: previous run still in progress, skipping tick")
        return {"skipped": True, "reason": "already_running"}
    started = time.perf_counter()
    db: Session = SessionLocal()
    try:
        result = revoke_expired_sessions(db)
        elapsed_ms = (time.perf_counter() - started) * 1000
        if result["sessionsRevoked"]:
            logger.info("expire_sessions: %s in %.1fms", result, elapsed_ms)
        else:
            logger.debug("expire_sessions: nothing to revoke (%.1fms)", elapsed_ms)
        return result
    except Exception:
        # Transient by definition: state is unchanged and the next tick retries
        logger.exception("expire_sessions failed")
        return {"error": True}
    finally:
        db.close()
        _expire_lock.release()
