from celery.utils.log import get_task_logger
from sqlalchemy.orm import Session

from eventhub import mailer
from eventhub.core.config import settings
from eventhub.db import SessionLocal
from eventhub.services import events_service
from eventhub.worker.celery_app import celery_app

logger = get_task_logger(__name__)


@celery_app.task(name="send_email")
def send_email(to: str, subject: str, text: str, html: str | None = None) -> dict:
    if not settings.smtp_host:
        logger.info("send_email skipped (SMTP_HOST unset) to=%s subject=%s", to, subject)
        return {"status": "skipped"}

    mailer.send(mailer.build_message(to, subject, text, html))
    logger.info("send_email delivered to=%s subject=%s", to, subject)
    return {"status": "sent"}


@celery_app.task(name="complete_ended_events")
def complete_ended_events() -> dict:
    db: Session = SessionLocal()
    try:
        completed = events_service.complete_ended_events(db)
        logger.info("complete_ended_events completed=%s", completed)
        return {"completed": completed}
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
