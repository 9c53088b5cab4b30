import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for API payloads: camelCase on the wire, snake_case accepted too.
    Incoming keys are matched case-insensitively ("StartTime", "starttime").
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def normalize_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        known = {}
        for name, field in cls.model_fields.items():
            known[name.lower()] = name
            if field.alias:
                known[field.alias.lower()] = field.alias
        return {known.get(str(key).lower(), key): value for key, value in data.items()}


# === 🔍 Slot Search ===
class SlotSearchRequest(CamelModel):
    date: Optional[str] = Field(None, description="yyyy-MM-dd, defaults to today", examples=["2026-10-19"])
    desired: str = Field(..., description="Desired time of day, HH:mm", examples=["09:07"])
    count: Optional[int] = Field(5, description="Maximum number of slots to return; null or values <= 0 fall back to the default")


class SlotResponse(CamelModel):
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    booked: bool
    client: str = ""
    description: str = ""
    advisor: str = ""

    @field_serializer("start_time", "end_time")
    def serialize_time(self, value: dt.time) -> str:
        return value.strftime("%H:%M")


# === 📅 Booking ===
class BookingRequest(CamelModel):
    date: Optional[str] = Field(None, description="yyyy-MM-dd, defaults to today")
    start_time: Optional[str] = Field(None, description="HH:mm, required", examples=["10:00"])
    client: Optional[str] = None
    description: Optional[str] = None
    advisor: Optional[str] = None


class CancelRequest(CamelModel):
    date: Optional[str] = Field(None, description="yyyy-MM-dd, defaults to today")
    start_time: Optional[str] = Field(None, description="HH:mm, required")
    client: Optional[str] = Field(None, description="Client name used when booking, required")


class SlotActionResponse(CamelModel):
    status: str
    date: dt.date
    start_time: dt.time

    @field_serializer("start_time")
    def serialize_time(self, value: dt.time) -> str:
        return value.strftime("%H:%M")
