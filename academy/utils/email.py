import logging

import requests

from academy.core.config import settings

logger = logging.getLogger(__name__)


def send_email(*, to: str, subject: str, html: str) -> bool:
    """
    Transactional email via Resend.
    Returns True if Resend accepted the message, False otherwise. Never raises.
    """
    if not settings.resend_api_key:
        logger.warning("Resend not configured; missing=RESEND_API_KEY")
        return False

    payload = {"from": settings.resend_from, "to": [to], "subject": subject, "html": html}
    headers = {
        "Authorization": f"Bearer {settings.resend_api_key}",
        "Content-Type": "application/json",
    }
    try:
        resp = requests.post(settings.resend_api_url, json=payload, headers=headers, timeout=10)
        if resp.status_code // 100 == 2:
            return True
        logger.warning("Resend email send failed: status=%s body=%s", resp.status_code, resp.text[:200])
        return False
    except requests.RequestException as e:
        logger.warning("Resend email send exception: %s", e)
        return False
