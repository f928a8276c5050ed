"""
Email Service - SMTP delivery for meeting invites and demo confirmations.

Email is a side channel: callers decide whether a failure matters.
`send` raises EmailDeliveryError when the SMTP server rejects or cannot be
reached, and returns False (without raising) when SMTP is not configured.
"""
import logging
import smtplib
from email.message import EmailMessage

from app.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    pass


class EmailService:
    def __init__(self):
        self.enabled = settings.smtp_enabled

    def _build_message(self, to_email: str, subject: str, html_body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = f"{settings.smtp_from_name} <{settings.smtp_from}>"
        msg["To"] = to_email
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(html_body, subtype="html")
        return msg

    def _connect(self) -> smtplib.SMTP:
        use_ssl = settings.smtp_port == 465 or settings.smtp_use_ssl
        if use_ssl:
            return smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout_seconds)
        server = smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout_seconds)
        if settings.smtp_use_tls:
            server.starttls()
        return server

    def send(self, to_email: str, subject: str, html_body: str) -> bool:
        """Send one HTML email. Returns True when handed to the SMTP server."""
        if not self.enabled:
            logger.warning("SMTP not configured; skipping email to %s (%s)", to_email, subject)
            return False

        msg = self._build_message(to_email, subject, html_body)
        try:
            with self._connect() as server:
                if settings.smtp_username:
                    server.login(settings.smtp_username, settings.smtp_password)
                server.send_message(msg)
        except smtplib.SMTPAuthenticationError as exc:
            raise EmailDeliveryError(f"SMTP authentication failed for {settings.smtp_username}") from exc
        except (smtplib.SMTPException, OSError) as exc:
            raise EmailDeliveryError(f"Could not deliver email to {to_email}: {exc}") from exc

        logger.info("Email sent to %s (%s)", to_email, subject)
        return True


# Singleton instance
_email_service: EmailService = None


def get_email_service() -> EmailService:
    """Get or create email service (singleton pattern)"""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
