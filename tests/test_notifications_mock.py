import pytest
from unittest.mock import MagicMock, patch

from app.core.config import Settings
from app.models.booking import BookingRequest
from app.services.notification_service import EmailService, build_booking_email


def _settings(**overrides):
    values = dict(
        _env_file=None,
        EMAIL_USER="bookings@example.com",
        EMAIL_PASS="app-password",
        ADMIN_EMAIL="admin@example.com",
    )
    values.update(overrides)
    return Settings(**values)


@patch("app.services.notification_service.smtplib.SMTP")
def test_verify_ok(mock_smtp_cls):
    mock_server = MagicMock()
    mock_smtp_cls.return_value = mock_server

    assert EmailService(_settings()).verify() is True
    mock_smtp_cls.assert_called_once_with("smtp.gmail.com", 587, timeout=30.0)
    mock_server.starttls.assert_called_once()
    mock_server.login.assert_called_with("bookings@example.com", "app-password")
    mock_server.quit.assert_called_once()


@patch("app.services.notification_service.smtplib.SMTP")
def test_verify_failure_does_not_raise(mock_smtp_cls):
    mock_smtp_cls.return_value.login.side_effect = Exception("535 bad credentials")
    assert EmailService(_settings()).verify() is False


@patch("app.services.notification_service.smtplib.SMTP")
def test_verify_without_credentials(mock_smtp_cls):
    assert EmailService(_settings(EMAIL_PASS="")).verify() is False
    mock_smtp_cls.assert_not_called()


@pytest.mark.asyncio
@patch("app.services.notification_service.smtplib.SMTP")
async def test_send_html_to_admin(mock_smtp_cls):
    mock_server = MagicMock()
    mock_smtp_cls.return_value = mock_server

    await EmailService(_settings()).send("Subject", "<p>Hello</p>")

    mock_server.sendmail.assert_called_once()
    sender, recipients, message = mock_server.sendmail.call_args.args
    assert sender == "bookings@example.com"
    assert recipients == ["admin@example.com"]
    assert "TOMS Compliance" in message
    assert "text/html" in message
    mock_server.quit.assert_called_once()


@pytest.mark.asyncio
@patch("app.services.notification_service.smtplib.SMTP")
async def test_send_raises_on_smtp_error(mock_smtp_cls):
    mock_smtp_cls.return_value.sendmail.side_effect = Exception("421 service not available")

    with pytest.raises(Exception, match="421"):
        await EmailService(_settings()).send("Subject", "<p>Hello</p>")


@pytest.mark.asyncio
@patch("app.services.notification_service.smtplib.SMTP")
async def test_send_without_recipient(mock_smtp_cls):
    with pytest.raises(RuntimeError):
        await EmailService(_settings(ADMIN_EMAIL="")).send("Subject", "<p>Hello</p>")
    mock_smtp_cls.assert_not_called()


def test_booking_email_escapes_fields():
    booking = BookingRequest(name="<b>Eve</b>", phone="555-1234", service="Audit", date="2024-05-01", time="10:00")
    html = build_booking_email(booking, "5551234")

    assert "&lt;b&gt;Eve&lt;/b&gt;" in html
    assert "<b>Eve</b>" not in html
    assert 'href="tel:5551234"' in html
    assert "<b>Service:</b> Audit" in html
