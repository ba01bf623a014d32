import json
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter

from app.core.logger import logger
from app.core.security import error_response
from app.models.booking import BookingRequest, BookingResponse
from app.services.booking_service import BookingService

FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


class InvalidBody(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def get_booking_service(request: Request) -> BookingService:
    return request.app.state.booking_service


async def read_payload(request: Request) -> Dict[str, Any]:
    """
    Parses a JSON or form-encoded body into a dict.
    Other content types yield an empty payload.
    Body size is already capped by BodySizeLimitMiddleware.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    if content_type in FORM_TYPES:
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}

    body = await request.body()
    if not body or content_type not in ("application/json", ""):
        return {}

    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidBody(400, "Invalid request body")

    if not isinstance(payload, dict):
        raise InvalidBody(400, "Invalid request body")
    return payload


def create_router(limiter: Limiter, rate_limit: str) -> APIRouter:
    router = APIRouter()

    @router.post("/book-call", response_model=BookingResponse)
    @limiter.limit(rate_limit)
    async def book_call(request: Request, booking_service: BookingService = Depends(get_booking_service)):
        try:
            payload = await read_payload(request)
        except InvalidBody as e:
            logger.warning(f"⚠️ Rejected booking body: {e.message}")
            return error_response(e.status_code, e.message)

        booking = BookingRequest.from_payload(payload)
        if booking is None:
            return error_response(400, "All fields are required")

        try:
            await booking_service.book_call(booking)
        except Exception as e:
            logger.exception(f"❌ API ERROR: {e}")
            return error_response(500, "Server error")

        return JSONResponse(
            status_code=200,
            content=BookingResponse(success=True, message="Booking saved & email sent").model_dump(),
        )

    return router
