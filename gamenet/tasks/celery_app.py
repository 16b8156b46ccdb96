from urllib.parse import urlparse, urlunparse, parse_qs, urlencode

from celery import Celery
from gamenet.core.config import settings


def _redis_url_for_celery(url: str) -> str:
    """Celery requires ssl_cert_reqs for rediss:// (TLS Redis providers)."""
    if not url or not url.strip().lower().startswith("rediss://"):
        return url
    parsed = urlparse(url)
    qs = parse_qs(parsed.query)
    if "ssl_cert_reqs" not in qs:
        qs["ssl_cert_reqs"] = ["CERT_NONE"]
        return urlunparse(parsed._replace(query=urlencode(qs, doseq=True)))
    return url


_redis_url = _redis_url_for_celery(settings.REDIS_URL)

celery = Celery(
    "gamenet",
    broker=_redis_url,
    backend=_redis_url,
    include=["gamenet.tasks.jobs"],
)

celery.conf.timezone = settings.TIMEZONE

celery.conf.beat_schedule = {
    "expire-sessions-every-minute": {
        "task": "gamenet.tasks.jobs.expire_sessions",
        "schedule": float(settings.REAPER_INTERVAL_SECONDS),
        # A tick that is not picked up before the next one is dropped, not queued
        "options": {"expires": max(settings.REAPER_INTERVAL_SECONDS - 5, 1)},
    },
}
