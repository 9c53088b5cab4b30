from functools import lru_cache
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from scheduler.base.config import settings
from scheduler.base.metrics import outcome, slot_bookings_total, slot_cancellations_total, slot_searches_total
from scheduler.base.models import (
    BookingRequest,
    CancelRequest,
    SlotActionResponse,
    SlotResponse,
    SlotSearchRequest,
)
from scheduler.services import Slot, SlotEngine, SlotGridConfig
from scheduler.utils.time_utils import parse_iso_date, parse_iso_time

router = APIRouter()


def get_grid_config() -> SlotGridConfig:
    return SlotGridConfig(
        slot_duration_minutes=settings.SLOT_DURATION_MINUTES,
        day_start=settings.DAY_START,
        day_end=settings.DAY_END,
        horizon_days=settings.HORIZON_DAYS,
    )


@lru_cache()
def get_slot_engine() -> SlotEngine:
    return SlotEngine(get_grid_config())


def to_response(slot: Slot) -> SlotResponse:
    return SlotResponse(
        date=slot.date,
        start_time=slot.start_time,
        end_time=slot.end_time,
        booked=slot.booked,
        client=slot.client,
        description=slot.description,
        advisor=slot.advisor,
    )


def _date_or_today(value, engine: SlotEngine) -> str:
    return value if value and value.strip() else engine.clock().isoformat()


def _show_calendar(engine: SlotEngine):
    if settings.SHOW_CALENDAR_ON_CHANGE:
        engine.show_calendar()


# === API Endpoints ===

@router.post("/slots", response_model=List[SlotResponse])
def find_closest_slots(req: SlotSearchRequest, engine: SlotEngine = Depends(get_slot_engine)):
    desired_date = parse_iso_date(_date_or_today(req.date, engine))
    desired_time = parse_iso_time(req.desired)
    if desired_date is None or desired_time is None:
        raise HTTPException(status_code=400, detail="date must be yyyy-MM-dd and desired must be HH:mm")

    count = req.count if req.count is not None and req.count > 0 else settings.DEFAULT_SEARCH_COUNT
    slot_searches_total.inc()
    return [to_response(slot) for slot in engine.find_closest(desired_date, desired_time, count)]


@router.post("/book", response_model=SlotActionResponse)
def book_slot(req: BookingRequest, engine: SlotEngine = Depends(get_slot_engine)):
    date_str = _date_or_today(req.date, engine)
    if not req.start_time or not req.start_time.strip() or not req.client or not req.client.strip():
        raise HTTPException(status_code=400, detail="Both startTime and client are required")

    day, start = parse_iso_date(date_str), parse_iso_time(req.start_time)
    if day is None or start is None:
        raise HTTPException(status_code=400, detail="date must be yyyy-MM-dd and startTime must be HH:mm")

    ok = engine.book(date_str, req.start_time, req.client, req.description, req.advisor)
    slot_bookings_total.labels(result=outcome(ok)).inc()
    if not ok:
        raise HTTPException(status_code=409, detail="Failed to book: slot not found or already booked")

    _show_calendar(engine)
    return SlotActionResponse(status="booked", date=day, start_time=start)


@router.post("/cancel", response_model=SlotActionResponse)
def cancel_slot(req: CancelRequest, engine: SlotEngine = Depends(get_slot_engine)):
    date_str = _date_or_today(req.date, engine)
    if not req.start_time or not req.start_time.strip() or not req.client or not req.client.strip():
        raise HTTPException(status_code=400, detail="Both startTime and client are required")

    day, start = parse_iso_date(date_str), parse_iso_time(req.start_time)
    if day is None or start is None:
        raise HTTPException(status_code=400, detail="date must be yyyy-MM-dd and startTime must be HH:mm")

    ok = engine.cancel(date_str, req.start_time, req.client)
    slot_cancellations_total.labels(result=outcome(ok)).inc()
    if not ok:
        raise HTTPException(
            status_code=409,
            detail="Cancellation failed: slot not found, not booked, or client mismatch",
        )

    _show_calendar(engine)
    return SlotActionResponse(status="cancelled", date=day, start_time=start)


@router.get("/calendar", response_class=PlainTextResponse)
def show_calendar(engine: SlotEngine = Depends(get_slot_engine)):
    return engine.show_calendar(color=False)
