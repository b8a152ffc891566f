"""
Pytest configuration and shared fixtures.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from barbershop import models
from barbershop.appointments import AppointmentService, get_appointment_service
from barbershop.auth import create_access_token
from barbershop.availability import AvailabilityCalculator, get_availability_calculator
from barbershop.config import BookingConfig
from barbershop.db import get_session

# Monday morning, a couple of weeks before the booking day used in most tests
NOW = datetime(2024, 5, 20, 8, 0, tzinfo=timezone.utc)
BOOKING_DAY = date(2024, 6, 1)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def config():
    return BookingConfig()


@pytest.fixture
def appointment_service(config):
    return AppointmentService(config, clock=lambda: NOW)


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    def _make(role="customer", name=None, email=None):
        counter["n"] += 1
        user = models.User(
            email=email or f"{role}{counter['n']}@example.com",
            name=name or f"{role.title()} {counter['n']}",
            password_hash="not-a-real-hash",
            role=role,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def barber(make_user):
    return make_user("barber", name="Sam")


@pytest.fixture
def other_barber(make_user):
    return make_user("barber", name="Alex")


@pytest.fixture
def customer(make_user):
    return make_user("customer")


@pytest.fixture
def other_customer(make_user):
    return make_user("customer")


@pytest.fixture
def make_service(session):
    def _make(key, duration, price="30.00", name=None, active=True):
        service = models.Service(
            key=key,
            name=name or key.replace("_", " ").title(),
            price=Decimal(price),
            duration=duration,
            status="active" if active else "inactive",
        )
        session.add(service)
        session.commit()
        session.refresh(service)
        return service

    return _make


@pytest.fixture
def haircut(make_service):
    return make_service("haircut", 40, "30.00", name="Haircut")


@pytest.fixture
def make_schedule(session):
    def _make(barber_id, day=BOOKING_DAY, start="09:00", end="17:00", active=True):
        schedule = models.BarberSchedule(
            barber_id=barber_id, date=day, start_time=start, end_time=end, is_active=active
        )
        session.add(schedule)
        session.commit()
        session.refresh(schedule)
        return schedule

    return _make


@pytest.fixture
def make_appointment(session):
    """Insert an appointment row directly, bypassing booking rules. `at` is UTC."""

    def _make(customer_id, barber_id, at, duration=None, service=None, status=None):
        appointment = models.Appointment(
            customer_id=customer_id,
            barber_id=barber_id,
            appointment_date=datetime.fromisoformat(at).replace(tzinfo=timezone.utc),
            service_id=service.id if service is not None else None,
            service_type=service.name if service is not None else None,
            duration=duration,
            status=status,
        )
        session.add(appointment)
        session.commit()
        session.refresh(appointment)
        return appointment

    return _make


@pytest.fixture
def client(session, config):
    from barbershop.main import app

    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_appointment_service] = lambda: AppointmentService(
        config, clock=lambda: NOW
    )
    app.dependency_overrides[get_availability_calculator] = lambda: AvailabilityCalculator(
        config, clock=lambda: NOW
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token({"sub": user.email})
        return {"Authorization": f"Bearer {token}"}

    return _headers
