from gamenet.tasks.celery_app import celery
from gamenet.tasks import worker_jobs

@celery.task(name="gamenet.tasks.jobs.expire_sessions")
def expire_sessions():
    return worker_jobs.expire_sessions()
