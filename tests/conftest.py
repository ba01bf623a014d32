import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app


@pytest.fixture
def jane():
    return {
        "name": "Jane Doe",
        "phone": "555-1234",
        "service": "Audit",
        "date": "2024-05-01",
        "time": "10:00",
    }


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        LOG_FILE="",
        EMAIL_USER="bookings@example.com",
        EMAIL_PASS="app-password",
        ADMIN_EMAIL="admin@example.com",
        GOOGLE_SHEET_ID="sheet-123",
    )


@pytest.fixture
def calls():
    """Records the order in which collaborators are hit."""
    return []


@pytest.fixture
def sheets(calls):
    sheets = MagicMock()
    sheets.available = True
    sheets.append_booking = AsyncMock(side_effect=lambda *args, **kwargs: calls.append("append") or True)
    return sheets


@pytest.fixture
def mailer(calls):
    mailer = MagicMock()
    mailer.send = AsyncMock(side_effect=lambda *args, **kwargs: calls.append("send"))
    return mailer


@pytest.fixture
def client(test_settings, sheets, mailer):
    app = create_app(settings=test_settings, sheets_service=sheets, email_service=mailer)
    with TestClient(app) as client:
        yield client
