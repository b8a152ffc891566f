# barbershop/conflicts.py

"""
Overlap checks between a candidate appointment and the non-cancelled
appointments already on the same calendar day.
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from .config import BookingConfig
from .core import (
    day_bounds,
    effective_duration,
    from_storage,
    is_valid_slot_boundary,
    ranges_overlap,
    slots_needed,
    to_local,
)
from .models import Appointment, CANCELLED

# returned when the candidate itself is off the slot grid
OFF_GRID = object()


def same_day_appointments(
    session: Session,
    day_start: datetime,
    day_end: datetime,
    barber_id: Optional[int] = None,
    customer_id: Optional[int] = None,
    exclude_id: Optional[int] = None,
) -> list[Appointment]:
    """Active appointments in [day_start, day_end) (storage datetimes)."""
    stmt = (
        select(Appointment)
        .options(selectinload(Appointment.service))
        .where(Appointment.appointment_date >= day_start)
        .where(Appointment.appointment_date < day_end)
        .where((Appointment.status.is_(None)) | (Appointment.status != CANCELLED))
    )
    if barber_id is not None:
        stmt = stmt.where(Appointment.barber_id == barber_id)
    if customer_id is not None:
        stmt = stmt.where(Appointment.customer_id == customer_id)
    if exclude_id is not None:
        stmt = stmt.where(Appointment.id != exclude_id)
    return list(session.exec(stmt.order_by(Appointment.appointment_date)).all())


def first_overlap(
    start: datetime,
    end: datetime,
    existing: list[Appointment],
    config: BookingConfig,
) -> Optional[Appointment]:
    for appointment in existing:
        other_start = from_storage(appointment.appointment_date)
        other_end = other_start + timedelta(
            minutes=effective_duration(appointment, config.slot_width_minutes)
        )
        if ranges_overlap(start, end, other_start, other_end):
            return appointment
    return None


def _candidate_day(start: datetime, config: BookingConfig):
    return day_bounds(to_local(start, config.shop_tz).date(), config.shop_tz)


def find_barber_conflict(
    session: Session,
    barber_id: int,
    start: datetime,
    duration: Optional[int],
    config: BookingConfig,
    exclude_id: Optional[int] = None,
):
    """
    First appointment of the barber overlapping the candidate, `OFF_GRID`
    when the candidate does not start on a slot boundary, else None.

    The candidate occupies whole slots: its length is rounded up to the grid.
    """
    width = config.slot_width_minutes
    if not is_valid_slot_boundary(start, width, config.shop_tz):
        return OFF_GRID

    start = from_storage(start)
    end = start + timedelta(minutes=slots_needed(duration or width, width) * width)
    day_start, day_end = _candidate_day(start, config)
    existing = same_day_appointments(
        session, day_start, day_end, barber_id=barber_id, exclude_id=exclude_id
    )
    return first_overlap(start, end, existing, config)


def find_customer_conflict(
    session: Session,
    customer_id: int,
    start: datetime,
    duration: Optional[int],
    config: BookingConfig,
    exclude_id: Optional[int] = None,
) -> Optional[Appointment]:
    """Same check over the customer's own appointments, with any barber."""
    start = from_storage(start)
    end = start + timedelta(minutes=duration or config.slot_width_minutes)
    day_start, day_end = _candidate_day(start, config)
    existing = same_day_appointments(
        session, day_start, day_end, customer_id=customer_id, exclude_id=exclude_id
    )
    return first_overlap(start, end, existing, config)


def has_barber_conflict(session, barber_id, start, duration, config, exclude_id=None) -> bool:
    return find_barber_conflict(session, barber_id, start, duration, config, exclude_id) is not None


def has_customer_conflict(session, customer_id, start, duration, config, exclude_id=None) -> bool:
    return find_customer_conflict(session, customer_id, start, duration, config, exclude_id) is not None
