# barbershop/schedules.py

"""
Per-barber, per-date working-hour windows.

Every operation is scoped to the barber id passed by the caller; a barber
can never read-modify another barber's rows through update/delete.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .config import BookingConfig, get_booking_config
from .core import is_valid_time_string, parse_date, time_to_minutes, to_local, utc_now
from .db import is_uniqueness_violation
from .errors import ConflictError, ForbiddenError, FormatError, NotFoundError, ValidationError
from .models import BarberSchedule

logger = logging.getLogger(__name__)


def _check_time_format(field: str, value: str):
    if not is_valid_time_string(value):
        raise FormatError(f"Invalid {field} format. Expected HH:MM")


def _check_time_range(start_time: str, end_time: str):
    if time_to_minutes(end_time) <= time_to_minutes(start_time):
        raise ValidationError("End time must be after start time")


def _check_not_past_today(start_time: str, day: date, config: BookingConfig, now):
    local_now = to_local(now or utc_now(), config.shop_tz)
    if day != local_now.date():
        return
    if time_to_minutes(start_time) < local_now.hour * 60 + local_now.minute:
        raise ValidationError("Cannot set time in the past for today")


def _get_owned(session: Session, schedule_id: int, barber_id: int) -> BarberSchedule:
    schedule = session.get(BarberSchedule, schedule_id)
    if schedule is None:
        raise NotFoundError("Schedule not found")
    if schedule.barber_id != barber_id:
        raise ForbiddenError("Access denied")
    return schedule


def get_schedule(session: Session, barber_id: int, day) -> Optional[BarberSchedule]:
    day = parse_date(day)
    return session.exec(
        select(BarberSchedule)
        .where(BarberSchedule.barber_id == barber_id)
        .where(BarberSchedule.date == day)
    ).first()


def list_schedules(
    session: Session,
    barber_id: int,
    start_date=None,
    end_date=None,
) -> list[BarberSchedule]:
    """Schedules ordered by date; both bounds are inclusive."""
    stmt = select(BarberSchedule).where(BarberSchedule.barber_id == barber_id)
    if start_date is not None:
        stmt = stmt.where(BarberSchedule.date >= parse_date(start_date))
    if end_date is not None:
        stmt = stmt.where(BarberSchedule.date <= parse_date(end_date))
    return list(session.exec(stmt.order_by(BarberSchedule.date)).all())


def create_schedule(
    session: Session,
    barber_id: int,
    day,
    start_time: str,
    end_time: str,
    is_active: bool = True,
    config: Optional[BookingConfig] = None,
    now=None,
) -> BarberSchedule:
    config = config or get_booking_config()
    day = parse_date(day)
    _check_time_format("startTime", start_time)
    _check_time_format("endTime", end_time)
    _check_time_range(start_time, end_time)
    _check_not_past_today(start_time, day, config, now)

    schedule = BarberSchedule(
        barber_id=barber_id,
        date=day,
        start_time=start_time,
        end_time=end_time,
        is_active=is_active,
    )
    session.add(schedule)
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        if not is_uniqueness_violation(exc):
            raise
        raise ConflictError(f"Schedule already exists for {day.isoformat()}") from exc

    session.refresh(schedule)
    logger.info("Created schedule %s for barber %s on %s", schedule.id, barber_id, day)
    return schedule


def update_schedule(
    session: Session,
    schedule_id: int,
    barber_id: int,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
    is_active: Optional[bool] = None,
    config: Optional[BookingConfig] = None,
    now=None,
) -> BarberSchedule:
    config = config or get_booking_config()
    schedule = _get_owned(session, schedule_id, barber_id)

    if start_time is not None:
        _check_time_format("startTime", start_time)
    if end_time is not None:
        _check_time_format("endTime", end_time)
    _check_time_range(start_time or schedule.start_time, end_time or schedule.end_time)
    # only a changed start time can land in the past
    if start_time is not None:
        _check_not_past_today(start_time, schedule.date, config, now)

    if start_time is not None:
        schedule.start_time = start_time
    if end_time is not None:
        schedule.end_time = end_time
    if is_active is not None:
        schedule.is_active = is_active

    session.add(schedule)
    session.commit()
    session.refresh(schedule)
    return schedule


def upsert_schedule(
    session: Session,
    barber_id: int,
    day,
    start_time: str,
    end_time: str,
    is_active: bool = True,
    config: Optional[BookingConfig] = None,
    now=None,
) -> BarberSchedule:
    existing = get_schedule(session, barber_id, day)
    if existing is None:
        return create_schedule(
            session, barber_id, day, start_time, end_time, is_active, config=config, now=now
        )
    return update_schedule(
        session,
        existing.id,
        barber_id,
        start_time=start_time,
        end_time=end_time,
        is_active=is_active,
        config=config,
        now=now,
    )


def delete_schedule(session: Session, schedule_id: int, barber_id: int) -> None:
    schedule = _get_owned(session, schedule_id, barber_id)
    session.delete(schedule)
    session.commit()
    logger.info("Deleted schedule %s of barber %s", schedule_id, barber_id)
