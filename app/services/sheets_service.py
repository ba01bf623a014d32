import asyncio
import json
from datetime import datetime
from typing import Optional

import google.auth.transport.requests
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from app.core.config import Settings
from app.core.logger import logger
from app.models.booking import BookingRequest

SCOPES = ['https://www.googleapis.com/auth/spreadsheets']
TOKEN_URI = 'https://oauth2.googleapis.com/token'


def submission_timestamp(now: Optional[datetime] = None) -> str:
    """US-locale stamp without zero padding, e.g. "5/1/2024, 2:05:09 PM"."""
    now = now or datetime.now()
    hour = now.hour % 12 or 12
    meridiem = 'AM' if now.hour < 12 else 'PM'
    return f"{now.month}/{now.day}/{now.year}, {hour}:{now:%M:%S} {meridiem}"


class SheetsService:
    """
    Appends booking rows to a Google Sheet.

    Authorization happens once in authorize(). If it fails the service stays
    unavailable for the life of the process and every append is skipped.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._service = None

    @property
    def available(self) -> bool:
        return self._service is not None

    def _load_credentials(self):
        """
        Service account credentials from either:
        1. GOOGLE_CLIENT_EMAIL + GOOGLE_PRIVATE_KEY (key may contain literal \\n).
        2. GOOGLE_CREDENTIALS_JSON (full key file contents).
        Returns None when neither is configured.
        """
        if self.settings.GOOGLE_CLIENT_EMAIL and self.settings.GOOGLE_PRIVATE_KEY:
            logger.info("🔑 Loading Google credentials from GOOGLE_CLIENT_EMAIL/GOOGLE_PRIVATE_KEY")
            info = {
                'type': 'service_account',
                'client_email': self.settings.GOOGLE_CLIENT_EMAIL,
                'private_key': self.settings.GOOGLE_PRIVATE_KEY.replace('\\n', '\n'),
                'token_uri': TOKEN_URI,
            }
        elif self.settings.GOOGLE_CREDENTIALS_JSON:
            logger.info("🔑 Loading Google credentials from GOOGLE_CREDENTIALS_JSON")
            info = json.loads(self.settings.GOOGLE_CREDENTIALS_JSON)
        else:
            return None
        return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)

    def authorize(self) -> bool:
        """Authorize and build the Sheets client. Never raises."""
        if not self.settings.GOOGLE_SHEET_ID:
            logger.warning("⚠️ GOOGLE_SHEET_ID not set. Sheet logging disabled.")
            return False

        try:
            creds = self._load_credentials()
            if creds is None:
                logger.warning("⚠️ No Google credentials found. Sheet logging disabled.")
                return False

            creds.refresh(google.auth.transport.requests.Request())
            self._service = build('sheets', 'v4', credentials=creds, cache_discovery=False)
            logger.info(f"✅ Google Sheets authorized as {creds.service_account_email}")
            return True
        except Exception as e:
            logger.error(f"❌ Google Sheets authorization failed: {e}")
            self._service = None
            return False

    async def append_booking(self, booking: BookingRequest, submitted_at: str) -> bool:
        """
        Append one row for the booking.
        Returns False (no call made) when the service is unavailable.
        Raises on API failure.
        """
        if not self.available:
            logger.warning("⚠️ Google Sheets unavailable, skipping row append.")
            return False

        row = booking.as_row(submitted_at)

        def _append():
            try:
                result = self._service.spreadsheets().values().append(
                    spreadsheetId=self.settings.GOOGLE_SHEET_ID,
                    range=self.settings.SHEET_RANGE,
                    valueInputOption='USER_ENTERED',
                    body={'values': [row]},
                ).execute()
            except HttpError as error:
                logger.error(f'❌ Google API Error: {error.content}')
                raise RuntimeError(f"Google API Error: {error.content}")

            updated = result.get('updates', {}).get('updatedRange')
            logger.info(f"📝 Booking row appended: {updated}")
            return True

        return await asyncio.to_thread(_append)
