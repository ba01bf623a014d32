import asyncio
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import PlainTextResponse
from slowapi.errors import RateLimitExceeded
from app.core.config import Settings, settings as default_settings
from app.api import booking
from app.core.logger import setup_logging, logger
from app.core.rate_limit import create_limiter, rate_limit_exceeded_handler
from app.core.security import (
    BodySizeLimitMiddleware,
    OriginGuardMiddleware,
    SecurityHeadersMiddleware,
    error_response,
)
from app.services.booking_service import BookingService
from app.services.notification_service import EmailService
from app.services.sheets_service import SheetsService
from contextlib import asynccontextmanager, suppress
from datetime import datetime

setup_logging()


def create_app(
    settings: Settings = None,
    sheets_service: SheetsService = None,
    email_service: EmailService = None,
) -> FastAPI:
    """
    Builds the application. Services passed in are used as-is; missing ones
    are created and checked once at startup.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info("🚀 Starting Booking Intake API")
        sheets = sheets_service
        if sheets is None:
            sheets = SheetsService(settings)
            await asyncio.to_thread(sheets.authorize)
        mailer = email_service
        if mailer is None:
            mailer = EmailService(settings)
            # SMTP self-check only logs; requests are served meanwhile
            app.state.smtp_check = asyncio.create_task(asyncio.to_thread(mailer.verify))
        app.state.booking_service = BookingService(sheets, mailer)
        yield
        # Shutdown
        smtp_check = getattr(app.state, "smtp_check", None)
        if smtp_check is not None and not smtp_check.done():
            smtp_check.cancel()
            with suppress(asyncio.CancelledError):
                await smtp_check
        logger.info("🛑 Shutting down backend")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="0.1.0",
        lifespan=lifespan
    )
    app.state.settings = settings
    limiter = create_limiter()
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # Global Exception Handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"🔥 UNHANDLED ERROR: {str(exc)}", exc_info=True)
        return error_response(500, "Server error")

    # Innermost first; the last one added wraps everything
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.MAX_BODY_BYTES)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_middleware(OriginGuardMiddleware, allowed_origins=settings.ALLOWED_ORIGINS)
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(SecurityHeadersMiddleware)

    app.include_router(booking.create_router(limiter, settings.RATE_LIMIT), prefix=settings.API_PREFIX, tags=["Booking"])

    @app.get("/", response_class=PlainTextResponse)
    async def liveness():
        return "API LIVE 🚀"

    @app.get("/health")
    async def health_check():
        service = getattr(app.state, "booking_service", None)
        return {
            "status": "ok",
            "environment": settings.ENVIRONMENT,
            "sheets": bool(service and service.sheets.available),
            "timestamp": datetime.now().isoformat(),
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=default_settings.PORT, server_header=False)
