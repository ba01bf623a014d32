import asyncio
import smtplib
from email.header import Header
from email.mime.text import MIMEText
from email.utils import formataddr
from html import escape

from app.core.config import Settings
from app.core.logger import logger
from app.models.booking import BookingRequest

BOOKING_SUBJECT = "📞 New Free Call Booking"

BOOKING_EMAIL_TEMPLATE = """
<div style="font-family:Arial;background:#f4f6f8;padding:20px">
  <div style="max-width:600px;margin:auto;background:#fff;border-radius:8px">
    <div style="background:#0f172a;color:#fff;padding:16px">
      <h2>📞 New Free Call Booking</h2>
    </div>
    <div style="padding:20px">
      <p><b>Name:</b> {name}</p>
      <p><b>Phone:</b> {phone}</p>
      <p><b>Service:</b> {service}</p>
      <p><b>Date:</b> {date}</p>
      <p><b>Time:</b> {time}</p>
      <a href="tel:{call_phone}"
         style="display:inline-block;margin-top:15px;background:#16a34a;color:#fff;padding:10px 20px;border-radius:6px;text-decoration:none">
        📞 Call Customer
      </a>
    </div>
  </div>
</div>
"""


def build_booking_email(booking: BookingRequest, call_phone: str) -> str:
    """Renders the admin notification card. Field values are HTML-escaped."""
    return BOOKING_EMAIL_TEMPLATE.format(
        name=escape(booking.name),
        phone=escape(booking.phone),
        service=escape(booking.service),
        date=escape(booking.date),
        time=escape(booking.time),
        call_phone=escape(call_phone),
    )


class EmailService:
    def __init__(self, settings: Settings):
        self.settings = settings

    def _connect(self) -> smtplib.SMTP:
        server = smtplib.SMTP(self.settings.SMTP_SERVER, self.settings.SMTP_PORT, timeout=self.settings.SMTP_TIMEOUT)
        server.starttls()
        server.login(self.settings.EMAIL_USER, self.settings.EMAIL_PASS)
        return server

    def verify(self) -> bool:
        """
        Startup self-check of the SMTP account.
        Only logs the outcome; request handling goes on either way.
        """
        if not self.settings.EMAIL_USER or not self.settings.EMAIL_PASS:
            logger.error("❌ SMTP ERROR: EMAIL_USER / EMAIL_PASS missing in .env.")
            return False

        try:
            server = self._connect()
            server.quit()
        except Exception as e:
            logger.error(f"❌ SMTP ERROR: {e}")
            return False

        logger.info(f"✅ SMTP READY – {self.settings.SMTP_SERVER} connected")
        return True

    async def send(self, subject: str, html_body: str, to_email: str = None) -> None:
        """
        Sends an HTML email, by default to ADMIN_EMAIL.
        Raises on any failure; nothing is retried.
        """
        to_email = to_email or self.settings.ADMIN_EMAIL
        if not to_email:
            raise RuntimeError("No recipient email (ADMIN_EMAIL missing)")
        if not self.settings.EMAIL_USER or not self.settings.EMAIL_PASS:
            raise RuntimeError("SMTP credentials missing")

        msg = MIMEText(html_body, 'html', 'utf-8')
        msg['From'] = formataddr((self.settings.MAIL_FROM_NAME, self.settings.EMAIL_USER))
        msg['To'] = to_email
        msg['Subject'] = Header(subject, 'utf-8')

        def _send():
            server = self._connect()
            try:
                server.sendmail(self.settings.EMAIL_USER, [to_email], msg.as_string())
            finally:
                server.quit()

        await asyncio.to_thread(_send)
        logger.info(f"✅ Email sent to {to_email} with subject: '{subject}'")
