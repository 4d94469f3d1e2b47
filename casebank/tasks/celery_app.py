from celery import Celery

from casebank.core.config import get_settings

settings = get_settings()

celery = Celery(
    "casebank",
    broker=settings.redis_url,
    backend=settings.redis_url,
)
celery.conf.update(
    timezone="UTC",
    task_track_started=True,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    beat_schedule={
        "restore-cleanup-staged-files": {
            "task": "casebank.tasks.tasks.cleanup_staged_files",
            "schedule": 60 * 60,
        }
    },
)
