import logging

import httpx

from dreampuff.config import get_settings
from dreampuff.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="send_session_notification", max_retries=3)
def send_session_notification(self, name: str, position: str) -> dict:
    """
    Announce a started work session on the outbound notification webhook.

    Delivery is best-effort: without a configured webhook the task is a
    no-op, and transport errors are retried a few times before giving up.

    Args:
        name: Staff member who started the session
        position: Declared role

    Returns:
        Dictionary with delivery result
    """
    url = get_settings().NOTIFY_WEBHOOK_URL
    if not url:
        logger.info(f"No notification webhook configured; skipping notice for {name}")
        return {"status": "skipped", "name": name}

    payload = {
        "title": "Sesi Baru Dimulai",
        "body": f"{name} ({position}) telah memulai sesi kerja.",
    }

    try:
        response = httpx.post(url, json=payload, timeout=10.0)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"Error sending session notification for {name}: {e}")
        raise self.retry(exc=e, countdown=30)

    logger.info(f"Session notification sent for {name}")
    return {"status": "sent", "name": name}
