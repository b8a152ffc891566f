# barbershop/availability.py

"""
Bookable slots for one barber on one date.

Steps:
  1. requested service -> number of consecutive slots needed
  2. barber schedule for the date (none or inactive -> no slots)
  3. candidate slots from the schedule window
  4. slots occupied by non-cancelled appointments
  5. drop booked, fragmented and (today) too-soon starts
"""

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from sqlmodel import Session

from .catalog import find_service
from .config import BookingConfig, get_booking_config
from .conflicts import same_day_appointments
from .core import (
    day_bounds,
    effective_duration,
    generate_slots,
    minutes_to_time,
    parse_date,
    ranges_overlap,
    slots_needed,
    time_to_minutes,
    to_local,
    utc_now,
)
from .schedules import get_schedule

logger = logging.getLogger(__name__)


class AvailabilityCalculator:
    def __init__(self, config: BookingConfig, clock: Callable[[], datetime] = utc_now):
        self.config = config
        self.clock = clock

    def requested_duration(self, session: Session, service_key: Optional[str]) -> int:
        width = self.config.slot_width_minutes
        if not service_key:
            return width
        service = find_service(session, service_key)
        if service is None or not service.is_active:
            return width
        return service.duration

    def booked_slots(self, session: Session, day: date, barber_id: int, candidates: list[str]) -> set[str]:
        """Candidate slots covered by any non-cancelled appointment of the day."""
        tz = self.config.shop_tz
        width = self.config.slot_width_minutes
        day_start, day_end = day_bounds(day, tz)
        appointments = same_day_appointments(session, day_start, day_end, barber_id=barber_id)

        booked = set()
        for appointment in appointments:
            local = to_local(appointment.appointment_date, tz)
            start = local.hour * 60 + local.minute
            length = slots_needed(effective_duration(appointment, width), width) * width
            for slot in candidates:
                slot_start = time_to_minutes(slot)
                if ranges_overlap(slot_start, slot_start + width, start, start + length):
                    booked.add(slot)
        return booked

    def compute(
        self,
        session: Session,
        day,
        barber_id: int,
        service_key: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> list[str]:
        day = parse_date(day)
        width = self.config.slot_width_minutes
        needed = slots_needed(self.requested_duration(session, service_key), width)

        schedule = get_schedule(session, barber_id, day)
        if schedule is None or not schedule.is_active:
            return []

        candidates = generate_slots(schedule.start_time, schedule.end_time, width)
        candidate_set = set(candidates)
        booked = self.booked_slots(session, day, barber_id, candidates)

        local_now = to_local(now or self.clock(), self.config.shop_tz)
        cutoff = None
        if day == local_now.date():
            earliest = local_now + timedelta(minutes=self.config.same_day_notice_minutes)
            # notice window running past midnight blocks the whole day
            cutoff = 24 * 60 if earliest.date() != day else earliest.hour * 60 + earliest.minute
            if earliest.second or earliest.microsecond:
                cutoff += 1

        available = []
        for slot in candidates:
            if slot in booked:
                continue
            start = time_to_minutes(slot)
            run = [minutes_to_time(start + i * width) for i in range(needed)]
            if not all(s in candidate_set and s not in booked for s in run):
                continue
            if cutoff is not None and start < cutoff:
                continue
            available.append(slot)

        logger.debug(
            "Availability barber=%s date=%s service=%s: %d of %d slots",
            barber_id, day, service_key, len(available), len(candidates),
        )
        return available


def get_availability_calculator() -> AvailabilityCalculator:
    return AvailabilityCalculator(get_booking_config())


def compute_availability(
    session: Session,
    day,
    barber_id: int,
    service_key: Optional[str] = None,
    config: Optional[BookingConfig] = None,
    now: Optional[datetime] = None,
) -> list[str]:
    return AvailabilityCalculator(config or get_booking_config()).compute(
        session, day, barber_id, service_key, now=now
    )
