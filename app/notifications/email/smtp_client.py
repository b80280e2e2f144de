# app/notifications/email/smtp_client.py
import logging
import smtplib
from email.message import EmailMessage

from app.core.config import get_settings
from app.notifications.email.base import EmailConfigurationError, EmailDeliveryError

settings = get_settings()
logger = logging.getLogger(__name__)


def send_via_smtp(
    from_email: str,
    to_email: str,
    subject: str,
    body: str,
    html: bool = False,
) -> None:
    """
    Deliver one message over SMTP, upgrading to STARTTLS when offered.

    Rejected credentials raise EmailConfigurationError (not worth retrying);
    connection and protocol failures raise EmailDeliveryError.
    """
    if not settings.email_smtp_host:
        raise EmailConfigurationError("EMAIL_SMTP_HOST is not configured")

    msg = EmailMessage()
    msg["From"] = from_email
    msg["To"] = to_email
    msg["Subject"] = subject

    if html:
        msg.set_content(body, subtype="html")
    else:
        msg.set_content(body)

    host = settings.email_smtp_host
    port = settings.email_smtp_port
    username = settings.email_smtp_username
    password = settings.email_smtp_password

    try:
        with smtplib.SMTP(host, port, timeout=10) as server:
            server.ehlo()
            try:
                server.starttls()
                server.ehlo()
            except smtplib.SMTPNotSupportedError:
                logger.debug("SMTP server %s does not offer STARTTLS", host)

            if username and password:
                server.login(username, password)

            server.send_message(msg)
    except smtplib.SMTPAuthenticationError as exc:
        raise EmailConfigurationError(f"SMTP authentication failed: {exc}") from exc
    except (smtplib.SMTPException, OSError) as exc:
        raise EmailDeliveryError(f"Failed to send email via SMTP: {exc}") from exc
