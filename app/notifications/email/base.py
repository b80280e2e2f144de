# app/notifications/email/base.py
import logging
from typing import Optional

from app.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("console", "smtp", "resend")


class EmailConfigurationError(RuntimeError):
    """
    The email backend is missing required configuration.
    Retrying cannot succeed, so delivery gives up immediately.
    """


class EmailDeliveryError(RuntimeError):
    """The backend accepted the request but delivery failed."""


def send_email(
    to_email: str,
    subject: str,
    body: str,
    *,
    reason: Optional[str] = None,
    html: bool = False,
) -> None:
    """
    Unified email sending abstraction supporting console, SMTP and Resend.

    - If email_sandbox_mode is True:
        all emails are sent to EMAIL_TEST_RECIPIENT (falls back to EMAIL_FROM).
    - Otherwise:
        uses EMAIL_BACKEND to choose the transport.
    """
    debug_reason = f" [{reason}]" if reason else ""
    backend = settings.email_backend.lower()
    if backend not in SUPPORTED_BACKENDS:
        raise EmailConfigurationError(
            f"Unknown EMAIL_BACKEND '{settings.email_backend}'. Use one of: {', '.join(SUPPORTED_BACKENDS)}"
        )

    # Apply sandbox mode
    actual_recipient = to_email
    if settings.email_sandbox_mode:
        actual_recipient = str(settings.email_test_recipient or settings.email_from)
        logger.info(
            f"[EMAIL SANDBOX{debug_reason}] Original: {to_email}, Redirected to: {actual_recipient}, Subject: {subject!r}"
        )

    if backend == "console":
        logger.info(f"[EMAIL CONSOLE{debug_reason}] To: {actual_recipient}, Subject: {subject!r}")
        logger.debug(body)
        return

    if backend == "resend":
        from app.notifications.email.resend_client import send_via_resend

        send_via_resend(
            from_email=str(settings.email_from),
            to_email=actual_recipient,
            subject=subject,
            html_body=body if html else f"<pre>{body}</pre>",
        )
    else:
        from app.notifications.email.smtp_client import send_via_smtp

        send_via_smtp(
            from_email=str(settings.email_from),
            to_email=actual_recipient,
            subject=subject,
            body=body,
            html=html,
        )

    logger.info(f"[EMAIL SENT{debug_reason}] To: {actual_recipient} (original: {to_email}), Subject: {subject!r}")
