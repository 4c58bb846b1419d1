from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from app.config import Settings
from app.features.privacy_reminder.services import NotificationError, SmtpNotificationService


@pytest.fixture
def smtp_settings():
    return Settings(
        _env_file=None,
        SMTP_HOST="smtp.example.com",
        SMTP_PORT=2525,
        SMTP_USER="mailer",
        SMTP_PASSWORD="secret",
        EMAIL_FROM="team@coved.org",
        PRIVACY_POLICY_URL="https://coved.org/privacy-policy",
    )


def test_privacy_reminder_message(smtp_settings):
    service = SmtpNotificationService(smtp_settings)

    message = service.build_privacy_reminder("parent@example.com")

    assert message["To"] == "parent@example.com"
    assert message["From"] == "CovEd <team@coved.org>"
    assert "privacy" in message["Subject"].lower()
    plain = message.get_body(preferencelist=("plain",)).get_content()
    html = message.get_body(preferencelist=("html",)).get_content()
    assert "https://coved.org/privacy-policy" in plain
    assert 'href="https://coved.org/privacy-policy"' in html


@pytest.mark.asyncio
async def test_send_uses_configured_server(smtp_settings):
    service = SmtpNotificationService(smtp_settings)

    with patch(
        "app.features.privacy_reminder.services.notification_service.aiosmtplib.send",
        new=AsyncMock(),
    ) as mock_send:
        await service.send_privacy_reminder("parent@example.com")

    kwargs = mock_send.await_args.kwargs
    assert kwargs["hostname"] == "smtp.example.com"
    assert kwargs["port"] == 2525
    assert kwargs["username"] == "mailer"
    assert kwargs["start_tls"] is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [aiosmtplib.SMTPRecipientsRefused([]), ConnectionRefusedError("refused")],
)
async def test_send_failures_raise_notification_error(smtp_settings, error):
    service = SmtpNotificationService(smtp_settings)

    with patch(
        "app.features.privacy_reminder.services.notification_service.aiosmtplib.send",
        new=AsyncMock(side_effect=error),
    ):
        with pytest.raises(NotificationError) as exc_info:
            await service.send_privacy_reminder("parent@example.com")

    assert exc_info.value.recipient == "parent@example.com"
    assert exc_info.value.recoverable is True
