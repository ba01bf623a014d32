import json
from typing import Any, Mapping, Optional
from pydantic import BaseModel

REQUIRED_FIELDS = ("name", "phone", "service", "date", "time")


class BookingRequest(BaseModel):
    name: str
    phone: str
    service: str
    date: str
    time: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Optional["BookingRequest"]:
        """
        Builds a booking from a parsed JSON/form body.
        Returns None when any required field is missing, empty (falsy) or
        not a scalar. Numbers and booleans are kept in their JSON spelling.
        Presence is the only check; no format validation is done.
        """
        values = {}
        for field in REQUIRED_FIELDS:
            value = payload.get(field)
            if not value or isinstance(value, (list, dict)):
                return None
            values[field] = value if isinstance(value, str) else json.dumps(value)
        return cls(**values)

    def as_row(self, submitted_at: str) -> list:
        return [self.name, self.phone, self.service, self.date, self.time, submitted_at]


class BookingResponse(BaseModel):
    success: bool
    message: str
