# scheduler/services/slot_engine_service.py

import logging
import threading
from dataclasses import dataclass, replace
from datetime import date, time, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from scheduler.utils.calendar_table import render_calendar_table
from scheduler.utils.time_utils import add_minutes, minutes_between, parse_iso_date, parse_iso_time

logger = logging.getLogger("slot_engine")

SlotKey = Tuple[date, time]


@dataclass(frozen=True)
class SlotGridConfig:
    """
    Shape of the bookable grid.

    Attributes:
        slot_duration_minutes: Length of every slot
        day_start: First slot start of each day
        day_end: No slot may end after this time
        horizon_days: Consecutive days, starting today, that carry slots
    """
    slot_duration_minutes: int = 15
    day_start: time = time(9, 0)
    day_end: time = time(17, 0)
    horizon_days: int = 14

    def __post_init__(self):
        if self.slot_duration_minutes <= 0:
            raise ValueError(f"slot_duration_minutes must be positive, got {self.slot_duration_minutes}")
        if self.horizon_days < 1:
            raise ValueError(f"horizon_days must be at least 1, got {self.horizon_days}")
        if self.day_start >= self.day_end:
            raise ValueError(f"day_start {self.day_start} must be before day_end {self.day_end}")
        if self.slots_per_day == 0:
            raise ValueError("Working day is shorter than a single slot")

    @property
    def slots_per_day(self) -> int:
        """32 with the defaults: (17:00 - 09:00) / 15 min."""
        return minutes_between(self.day_end, self.day_start) // self.slot_duration_minutes

    def slot_starts(self) -> List[time]:
        return [
            add_minutes(self.day_start, i * self.slot_duration_minutes)
            for i in range(self.slots_per_day)
        ]


@dataclass(frozen=True)
class Booking:
    client: str
    description: str = ""
    advisor: str = ""


@dataclass(frozen=True)
class Slot:
    """
    One bookable interval. Occupancy lives in ``booking``: a slot is booked
    exactly when it carries a Booking, and a Booking always has a client.
    """
    date: date
    start_time: time
    end_time: time
    booking: Optional[Booking] = None

    @property
    def key(self) -> SlotKey:
        return self.date, self.start_time

    @property
    def booked(self) -> bool:
        return self.booking is not None

    @property
    def client(self) -> str:
        return self.booking.client if self.booking else ""

    @property
    def description(self) -> str:
        return self.booking.description if self.booking else ""

    @property
    def advisor(self) -> str:
        return self.booking.advisor if self.booking else ""


class _SlotCell:
    """Mutable holder for one immutable Slot value, guarded by its own lock."""

    __slots__ = ("lock", "slot")

    def __init__(self, slot: Slot):
        self.lock = threading.Lock()
        self.slot = slot


class SlotEngine:
    """
    In-memory calendar of fixed-length slots over a rolling horizon.

    The set of slots is fixed by initialize(); afterwards only their bookings
    change. Each slot has its own lock, so book/cancel on different slots never
    contend, and readers see whole Slot values swapped in under that lock.
    """

    def __init__(self, config: Optional[SlotGridConfig] = None, clock: Callable[[], date] = date.today):
        self.config = config or SlotGridConfig()
        self.clock = clock
        self._cells: Dict[SlotKey, _SlotCell] = {}
        self._days: Dict[date, List[_SlotCell]] = {}

    def __len__(self) -> int:
        return len(self._cells)

    # === Initialise ===

    def initialize(self) -> None:
        """
        Rebuild the full grid starting today. Drops every existing booking.
        Must not run concurrently with any other call.
        """
        today = self.clock()
        starts = self.config.slot_starts()
        cells: Dict[SlotKey, _SlotCell] = {}
        days: Dict[date, List[_SlotCell]] = {}

        for offset in range(self.config.horizon_days):
            day = today + timedelta(days=offset)
            day_cells = []
            for start in starts:
                slot = Slot(day, start, add_minutes(start, self.config.slot_duration_minutes))
                cell = _SlotCell(slot)
                cells[slot.key] = cell
                day_cells.append(cell)
            days[day] = day_cells

        self._cells = cells
        self._days = days
        logger.info(
            f"[Init] {len(cells)} slots generated for {self.config.horizon_days} days from {today} "
            f"({self.config.slots_per_day}/day)"
        )

    # === Search ===

    def find_closest(self, desired_date: date, desired_time: time, count: int) -> List[Slot]:
        """
        Up to ``count`` unbooked slots on ``desired_date``, nearest to
        ``desired_time`` first. Equidistant slots come back in no particular order.
        """
        count = max(count, 1)
        available = [slot for slot in (cell.slot for cell in self._days.get(desired_date, ())) if not slot.booked]
        available.sort(key=lambda slot: minutes_between(slot.start_time, desired_time))

        logger.debug(f"[Search] {desired_date} {desired_time}: {len(available)} free, returning {min(count, len(available))}")
        return available[:count]

    def find_closest_today(self, desired_time: time, count: int) -> List[Slot]:
        return self.find_closest(self.clock(), desired_time, count)

    # === Book ===

    def book(
        self,
        date_str: Optional[str],
        start_time_str: Optional[str],
        client: Optional[str],
        description: Optional[str] = None,
        advisor: Optional[str] = None,
    ) -> bool:
        """Book the slot at (date, start time). Returns True on success."""
        if not start_time_str or not start_time_str.strip():
            logger.info("[Book] Rejected: start time missing")
            return False

        cell = self._lookup(date_str, start_time_str, "Book")
        if cell is None:
            return False

        client = client or ""
        if not client:
            logger.info(f"[Book] Rejected {date_str} {start_time_str}: client name is empty")
            return False

        booking = Booking(client=client, description=description or "", advisor=advisor or "")
        with cell.lock:
            if cell.slot.booked:
                logger.info(f"[Book] Rejected {date_str} {start_time_str}: already booked")
                return False
            cell.slot = replace(cell.slot, booking=booking)

        logger.info(f"[Book] {date_str} {start_time_str} booked for {client!r}")
        return True

    def book_today(
        self,
        start_time_str: Optional[str],
        client: Optional[str],
        description: Optional[str] = None,
        advisor: Optional[str] = None,
    ) -> bool:
        return self.book(self.clock().isoformat(), start_time_str, client, description, advisor)

    # === Cancel ===

    def cancel(self, date_str: Optional[str], start_time_str: Optional[str], client_name: Optional[str]) -> bool:
        """
        Free a booked slot. Only the exact client name used when booking
        (case-sensitive, untrimmed) may cancel it.
        """
        cell = self._lookup(date_str, start_time_str, "Cancel")
        if cell is None:
            return False

        with cell.lock:
            slot = cell.slot
            if not slot.booked:
                logger.info(f"[Cancel] Rejected {date_str} {start_time_str}: slot is not booked")
                return False
            if slot.client != client_name:
                logger.warning(f"[Cancel] Rejected {date_str} {start_time_str}: client mismatch")
                return False
            cell.slot = replace(slot, booking=None)

        logger.info(f"[Cancel] {date_str} {start_time_str} released by {client_name!r}")
        return True

    # === Lookup / Display ===

    def get_slot(self, day: date, start: time) -> Optional[Slot]:
        cell = self._cells.get((day, start))
        return cell.slot if cell else None

    def snapshot(self) -> List[Slot]:
        """Every slot, sorted by date then start time."""
        return sorted((cell.slot for cell in self._cells.values()), key=lambda slot: slot.key)

    def show_calendar(self, color: bool = True) -> str:
        table = render_calendar_table(self.snapshot(), color=color)
        logger.info(f"[Display]\n{table}")
        return table

    def _lookup(self, date_str: Optional[str], start_time_str: Optional[str], action: str) -> Optional[_SlotCell]:
        day = parse_iso_date(date_str)
        start = parse_iso_time(start_time_str)
        if day is None or start is None:
            logger.info(f"[{action}] Rejected: unparsable date/time {date_str!r} {start_time_str!r}")
            return None

        cell = self._cells.get((day, start))
        if cell is None:
            logger.info(f"[{action}] Rejected: no slot at {day} {start}")
        return cell
