import re
from datetime import datetime

from app.core.logger import logger
from app.models.booking import BookingRequest
from app.services.notification_service import BOOKING_SUBJECT, EmailService, build_booking_email
from app.services.sheets_service import SheetsService, submission_timestamp

_NON_DIGITS = re.compile(r"[^0-9]")


def normalize_phone(phone: str) -> str:
    """
    Reduces a phone number to digits for a tel: link.
    A '+' is kept only when it comes before the first digit.
    "+1 (555) 123-4567" -> "+15551234567"
    """
    digits = _NON_DIGITS.sub("", phone)
    first_digit = re.search(r"[0-9]", phone)
    head = phone[:first_digit.start()] if first_digit else phone
    return ("+" + digits) if "+" in head else digits


class BookingService:
    def __init__(self, sheets: SheetsService, mailer: EmailService):
        self.sheets = sheets
        self.mailer = mailer

    async def book_call(self, booking: BookingRequest) -> None:
        """
        Logs the booking to the sheet, then emails the admin.
        Sheet logging is skipped when Sheets never authorized.
        Any exception from either step propagates to the caller.
        """
        start = datetime.now()
        logger.info(f"📥 Booking Request - {booking.name}, tel: {booking.phone}, {booking.service} on {booking.date} {booking.time}")

        call_phone = normalize_phone(booking.phone)

        await self.sheets.append_booking(booking, submission_timestamp(start))

        html = build_booking_email(booking, call_phone)
        await self.mailer.send(BOOKING_SUBJECT, html)

        duration = (datetime.now() - start).total_seconds()
        logger.info(f"🏁 Booking processed in {duration:.2f}s")
