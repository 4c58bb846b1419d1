"""
Privacy reminder email delivery over SMTP.
"""

from email.message import EmailMessage

import aiosmtplib

from app.config import Settings
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

PRIVACY_REMINDER_SUBJECT = "A reminder about your privacy on CovEd"

PRIVACY_REMINDER_TEXT = """Hello,

Thank you for signing up with CovEd. A few days ago you verified your email
address, and we wanted to remind you how we handle your information.

We only share your contact details with the mentor you are matched with, and
you can ask us to delete your profile at any time.

You can read our full privacy policy here: {privacy_url}

The CovEd Team
"""

PRIVACY_REMINDER_HTML = """<html>
  <body>
    <p>Hello,</p>
    <p>Thank you for signing up with CovEd. A few days ago you verified your email
    address, and we wanted to remind you how we handle your information.</p>
    <p>We only share your contact details with the mentor you are matched with, and
    you can ask us to delete your profile at any time.</p>
    <p>You can read our full privacy policy <a href="{privacy_url}">here</a>.</p>
    <p>The CovEd Team</p>
  </body>
</html>
"""


class NotificationError(Exception):
    """Raised when a reminder email could not be delivered."""

    def __init__(self, message: str, recipient: str | None = None, recoverable: bool = True):
        super().__init__(message)
        self.recipient = recipient
        self.recoverable = recoverable


class SmtpNotificationService:
    """Sends privacy reminder emails through the configured SMTP server."""

    def __init__(self, settings: Settings):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.start_tls = settings.SMTP_START_TLS
        self.from_email = settings.EMAIL_FROM
        self.from_name = settings.EMAIL_FROM_NAME
        self.privacy_url = settings.PRIVACY_POLICY_URL

    def build_privacy_reminder(self, to_email: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = f"{self.from_name} <{self.from_email}>"
        message["To"] = to_email
        message["Subject"] = PRIVACY_REMINDER_SUBJECT
        message.set_content(PRIVACY_REMINDER_TEXT.format(privacy_url=self.privacy_url))
        message.add_alternative(
            PRIVACY_REMINDER_HTML.format(privacy_url=self.privacy_url), subtype="html"
        )
        return message

    async def send_privacy_reminder(self, to_email: str) -> None:
        """
        Send the privacy reminder to one address.

        Raises:
            NotificationError: If the SMTP exchange fails
        """
        message = self.build_privacy_reminder(to_email)

        try:
            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.smtp_user,
                password=self.smtp_password,
                start_tls=self.start_tls,
            )
        except aiosmtplib.SMTPException as e:
            raise NotificationError(
                f"SMTP send failed: {e}", recipient=to_email
            ) from e
        except OSError as e:
            raise NotificationError(
                f"SMTP connection failed: {e}", recipient=to_email
            ) from e

        logger.info("Privacy reminder sent", recipient=to_email)
