"""
Availability service - bookable slots for a doctor on a calendar day

Slots come from a fixed working-hours template (one per hour) minus the busy
intervals reported by the doctor's external calendar. Results are memoized per
(doctor, day) in a TTL cache so repeated lookups skip the calendar API.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Union
from zoneinfo import ZoneInfo

from ...cache import TTLCache, availability_cache
from ...config import (
    SLOT_DURATION_MINUTES,
    WORKING_HOURS_END,
    WORKING_HOURS_START,
    WORKING_TIMEZONE,
)
from ...models import Doctor
from ...shared.validators import ensure_utc
from .schemas import BusyInterval, TimeSlot

logger = logging.getLogger(__name__)

# Returns an object with async query_busy/create_event/update_event/delete_event
CalendarFactory = Callable[[Doctor], object]


def calendar_day(value: Union[date, datetime], tz: ZoneInfo) -> date:
    """Calendar day of value in the working timezone; naive datetimes are UTC"""
    if isinstance(value, datetime):
        return ensure_utc(value).astimezone(tz).date()
    return value


def day_bounds(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Local midnight through 23:59:59.999 of day, as UTC instants"""
    start = datetime.combine(day, time(0), tzinfo=tz)
    end = start + timedelta(days=1) - timedelta(milliseconds=1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def generate_candidate_slots(
    day: date,
    tz: ZoneInfo,
    work_start: int = WORKING_HOURS_START,
    work_end: int = WORKING_HOURS_END,
) -> list[TimeSlot]:
    """One slot per whole hour in [work_start, work_end)"""
    slots = []
    for hour in range(work_start, work_end):
        start = datetime.combine(day, time(hour), tzinfo=tz).astimezone(timezone.utc)
        slots.append(TimeSlot(start=start, end=start + timedelta(minutes=SLOT_DURATION_MINUTES)))
    return slots


def exclude_busy(slots: list[TimeSlot], busy: list[BusyInterval]) -> list[TimeSlot]:
    """Drop every slot that overlaps any busy interval"""
    return [slot for slot in slots if not any(slot.overlaps(interval) for interval in busy)]


def _serialize(slots: list[TimeSlot]) -> list[dict]:
    return [{"start": slot.start.isoformat(), "end": slot.end.isoformat()} for slot in slots]


def _deserialize(raw: list[dict]) -> list[TimeSlot]:
    return [TimeSlot(start=datetime.fromisoformat(s["start"]), end=datetime.fromisoformat(s["end"])) for s in raw]


class AvailabilityResolver:
    """Computes available time slots for doctors, caching per doctor and day"""

    def __init__(
        self,
        calendar_factory: CalendarFactory,
        cache: TTLCache = availability_cache,
        work_start: int = WORKING_HOURS_START,
        work_end: int = WORKING_HOURS_END,
        tz_name: str = WORKING_TIMEZONE,
    ):
        self.calendar_factory = calendar_factory
        self.cache = cache
        self.work_start = work_start
        self.work_end = work_end
        self.tz = ZoneInfo(tz_name)

    def cache_key(self, doctor: Doctor, day: date) -> str:
        return f"{doctor.id}-{day.isoformat()}"

    async def get_available_time_slots(self, doctor: Doctor, value: Union[date, datetime]) -> list[TimeSlot]:
        """
        Get bookable slots for doctor on the calendar day containing value.

        Raises ExternalServiceError when the doctor's calendar cannot be queried.
        """
        day = calendar_day(value, self.tz)

        async def compute() -> list[dict]:
            calendar = self.calendar_factory(doctor)
            day_start, day_end = day_bounds(day, self.tz)
            busy = await calendar.query_busy(day_start, day_end)
            candidates = generate_candidate_slots(day, self.tz, self.work_start, self.work_end)
            available = exclude_busy(candidates, busy)
            logger.info(
                f"Computed availability for doctor {doctor.id} on {day}: "
                f"{len(available)}/{len(candidates)} slots free ({len(busy)} busy intervals)"
            )
            return _serialize(available)

        raw = await self.cache.get_or_compute(self.cache_key(doctor, day), compute)
        return _deserialize(raw)

    async def is_slot_available(self, doctor: Doctor, date_time: datetime) -> bool:
        """True when date_time is exactly the start of an available slot"""
        wanted = ensure_utc(date_time)
        slots = await self.get_available_time_slots(doctor, wanted)
        return any(slot.start == wanted for slot in slots)
