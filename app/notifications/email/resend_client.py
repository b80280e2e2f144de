# app/notifications/email/resend_client.py
import httpx

from app.core.config import get_settings
from app.notifications.email.base import EmailConfigurationError, EmailDeliveryError

settings = get_settings()

RESEND_API_URL = "https://api.resend.com/emails"


def send_via_resend(
    from_email: str,
    to_email: str,
    subject: str,
    html_body: str,
) -> None:
    """
    Send email via Resend API.
    """
    if not settings.resend_api_key:
        raise EmailConfigurationError("RESEND_API_KEY is not configured")

    headers = {
        "Authorization": f"Bearer {settings.resend_api_key}",
        "Content-Type": "application/json",
    }
    payload = {
        "from": from_email,
        "to": to_email,
        "subject": subject,
        "html": html_body,
    }

    try:
        response = httpx.post(RESEND_API_URL, json=payload, headers=headers, timeout=10.0)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        if exc.response.status_code in (401, 403):
            raise EmailConfigurationError(f"Resend rejected the API key ({exc.response.status_code})") from exc
        raise EmailDeliveryError(f"Resend returned {exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        raise EmailDeliveryError(f"Failed to reach Resend: {exc}") from exc
