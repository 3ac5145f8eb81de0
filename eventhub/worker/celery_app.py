from celery import Celery
from celery.schedules import crontab

from eventhub.core.config import settings

celery_app = Celery(
    "eventhub",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["eventhub.worker.tasks"],
)

celery_app.conf.update(
    task_always_eager=settings.celery_task_always_eager,
    task_eager_propagates=True,
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.event_timezone,
    enable_utc=True,
    beat_schedule={
        "complete-ended-events-nightly": {
            "task": "complete_ended_events",
            "schedule": crontab(minute=0, hour=0),
        },
    },
)
