"""Outbound e-mail for account activation and password reset.

Messages go through a pluggable transport so tests can capture or fail them.
The default transport speaks SMTP using the settings in accounts.config.
"""

import logging
import smtplib
from collections.abc import Callable
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from accounts.config import get_settings
from accounts.errors import EmailDeliveryFailure

logger = logging.getLogger("accounts.email")

Transport = Callable[[MIMEMultipart], None]


def smtp_transport(msg: MIMEMultipart) -> None:
    """Deliver a message through the configured SMTP server."""
    settings = get_settings()
    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as server:
        server.ehlo()
        if settings.SMTP_USE_TLS:
            server.starttls()
            server.ehlo()
        if settings.SMTP_USERNAME:
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        server.send_message(msg)


class EmailService:
    """Builds account e-mails and hands them to a transport."""

    def __init__(self, transport: Transport | None = None) -> None:
        self.transport = transport or smtp_transport

    def _send(self, to_email: str, subject: str, text_body: str, html_body: str) -> None:
        settings = get_settings()
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = settings.MAIL_FROM
        msg["To"] = to_email
        msg.attach(MIMEText(text_body, "plain"))
        msg.attach(MIMEText(html_body, "html"))

        try:
            self.transport(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send '%s' email to %s: %s", subject, to_email, e)
            raise EmailDeliveryFailure() from e

        logger.info("'%s' email sent to %s", subject, to_email)

    def send_account_activation(self, to_email: str, token: str) -> None:
        link = f"{get_settings().FRONTEND_URL}/#/login?token={token}"
        text_body = f"Please open the link below to activate your account:\n\n{link}"
        html_body = f"""
        <div>
          <b>Please click below link to activate your account</b>
        </div>
        <div>
          <a href="{link}">Activate</a>
        </div>
        """
        self._send(to_email, "Account Activation", text_body, html_body)

    def send_password_reset(self, to_email: str, token: str) -> None:
        link = f"{get_settings().FRONTEND_URL}/#/password-reset?reset={token}"
        text_body = f"Please open the link below to reset your password:\n\n{link}"
        html_body = f"""
        <div>
          <b>Please click below link to reset your password</b>
        </div>
        <div>
          <a href="{link}">Reset</a>
        </div>
        """
        self._send(to_email, "Password Reset", text_body, html_body)


_email_service: EmailService | None = None


def get_email_service() -> EmailService:
    """Get singleton e-mail service instance."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
