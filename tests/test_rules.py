"""
Tests for the advance window, daily cap and cancellation deadline.
"""

from datetime import datetime, timezone

import pytest

from barbershop.config import BookingConfig
from barbershop.errors import ValidationError
from barbershop.rules import (
    can_cancel,
    check_cancellation_deadline,
    check_max_appointments_per_day,
    count_appointments_on_day,
    validate_advance_booking,
)

NOW = datetime(2024, 5, 20, 8, 0, tzinfo=timezone.utc)


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def test_ordinary_booking_passes(config):
    validate_advance_booking(utc(2024, 6, 1, 10, 0), config, NOW)


def test_past_is_rejected(config):
    with pytest.raises(ValidationError, match="past"):
        validate_advance_booking(utc(2024, 5, 19, 10, 0), config, NOW)


def test_off_grid_message_lists_the_slot_marks(config):
    with pytest.raises(ValidationError) as exc_info:
        validate_advance_booking(utc(2024, 6, 1, 10, 10), config, NOW)
    assert exc_info.value.message == "Appointments must start at :00, :20, or :40 past the hour"


def test_off_grid_message_follows_width():
    with pytest.raises(ValidationError, match=":00, :15, :30, or :45"):
        validate_advance_booking(utc(2024, 6, 1, 10, 10), BookingConfig(slot_width_minutes=15), NOW)


def test_same_day_notice(config):
    slot = utc(2024, 6, 1, 10, 0)

    # ten minutes ahead: too short
    with pytest.raises(ValidationError, match="15 minutes"):
        validate_advance_booking(slot, config, utc(2024, 6, 1, 9, 50))
    # twenty minutes ahead: fine
    validate_advance_booking(slot, config, utc(2024, 6, 1, 9, 40))
    # exactly the notice period is enough
    validate_advance_booking(slot, config, utc(2024, 6, 1, 9, 45))


def test_same_day_notice_can_be_disabled():
    config = BookingConfig(same_day_notice_minutes=0)
    validate_advance_booking(utc(2024, 6, 1, 10, 0), config, utc(2024, 6, 1, 9, 59))


def test_max_advance_window(config):
    # NOW is 2024-05-20 08:00, three months later is 2024-08-20 08:00
    validate_advance_booking(utc(2024, 8, 20, 8, 0), config, NOW)
    with pytest.raises(ValidationError, match="3 months"):
        validate_advance_booking(utc(2024, 8, 20, 8, 20), config, NOW)


def test_count_ignores_cancelled_and_other_customers(
    session, config, barber, customer, other_customer, make_appointment
):
    make_appointment(customer.id, barber.id, "2024-06-01T09:00", duration=20)
    make_appointment(customer.id, barber.id, "2024-06-01T11:00", duration=20, status="cancelled")
    make_appointment(other_customer.id, barber.id, "2024-06-01T12:00", duration=20)

    assert count_appointments_on_day(session, customer.id, utc(2024, 6, 1, 15, 0), config) == 1


def test_count_uses_utc_calendar_day(session, config, barber, customer, make_appointment):
    make_appointment(customer.id, barber.id, "2024-06-01T23:40", duration=20)
    make_appointment(customer.id, barber.id, "2024-06-02T00:00", duration=20)

    assert count_appointments_on_day(session, customer.id, utc(2024, 6, 1, 8, 0), config) == 1
    assert count_appointments_on_day(session, customer.id, utc(2024, 6, 2, 8, 0), config) == 1


def test_count_honors_exclude_id(session, config, barber, customer, make_appointment):
    first = make_appointment(customer.id, barber.id, "2024-06-01T09:00", duration=20)
    make_appointment(customer.id, barber.id, "2024-06-01T10:00", duration=20)

    assert count_appointments_on_day(session, customer.id, utc(2024, 6, 1), config, exclude_id=first.id) == 1


def test_daily_cap(session, config, barber, other_barber, customer, make_appointment):
    make_appointment(customer.id, barber.id, "2024-06-01T09:00", duration=20)
    check_max_appointments_per_day(session, customer.id, utc(2024, 6, 1, 16, 0), config)

    make_appointment(customer.id, other_barber.id, "2024-06-01T13:00", duration=20)
    with pytest.raises(ValidationError) as exc_info:
        check_max_appointments_per_day(session, customer.id, utc(2024, 6, 1, 16, 0), config)
    assert exc_info.value.message == "You can only have 2 appointments per day"

    # the next day is unaffected
    check_max_appointments_per_day(session, customer.id, utc(2024, 6, 2, 9, 0), config)


def test_cancellation_deadline(config):
    start = utc(2024, 6, 1, 10, 0)

    assert can_cancel(start, config, utc(2024, 6, 1, 8, 59))
    assert can_cancel(start, config, utc(2024, 6, 1, 9, 0))
    assert not can_cancel(start, config, utc(2024, 6, 1, 9, 1))

    # SQLite reads come back without tzinfo; those are UTC
    assert can_cancel(datetime(2024, 6, 1, 10, 0), config, utc(2024, 6, 1, 9, 0))

    with pytest.raises(ValidationError, match="1 hour in advance"):
        check_cancellation_deadline(start, config, utc(2024, 6, 1, 9, 30))
