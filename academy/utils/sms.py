import logging

import requests

from academy.core.config import settings
from academy.utils.phone import digits

logger = logging.getLogger(__name__)


def textlk_missing_fields() -> list[str]:
    missing: list[str] = []
    if not settings.textlk_api_token:
        missing.append("TEXTLK_API_TOKEN")
    if not (settings.textlk_sender_id or "").strip():
        missing.append("TEXTLK_SENDER_ID")
    return missing


def send_sms(recipient: str, message: str) -> bool:
    """
    Plain SMS via text.lk.
    Returns True if the gateway accepted the message, False otherwise. Never raises.
    """
    missing = textlk_missing_fields()
    if missing:
        logger.warning("text.lk not configured; missing=%s", ",".join(missing))
        return False

    mobile = digits(recipient)
    if not mobile:
        logger.warning("SMS send skipped: invalid recipient=%r", recipient)
        return False

    payload = {
        "recipient": mobile,
        "sender_id": settings.textlk_sender_id,
        "type": "plain",
        "message": message,
    }
    headers = {
        "Authorization": f"Bearer {settings.textlk_api_token}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }
    try:
        resp = requests.post(settings.textlk_api_url, json=payload, headers=headers, timeout=10)
        if resp.status_code // 100 == 2:
            return True
        logger.warning("text.lk SMS send failed: status=%s body=%s", resp.status_code, resp.text[:200])
        return False
    except requests.RequestException as e:
        logger.warning("text.lk SMS send exception: %s", e)
        return False
