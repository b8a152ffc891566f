# barbershop/models.py

from typing import Optional
from datetime import datetime, date as Date
from decimal import Decimal
from enum import Enum

from sqlalchemy import DateTime, Index, UniqueConstraint, text
from sqlmodel import SQLModel, Field, Relationship

from .core import utc_now

CANCELLED = "cancelled"


class ServiceStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    name: str = ""
    password_hash: str
    role: str  # barber or customer


class BarberSchedule(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("barber_id", "date", name="uq_barber_schedule_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    barber_id: int = Field(foreign_key="user.id", index=True)
    date: Date = Field(index=True)
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    is_active: bool = True


class Service(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    key: str = Field(index=True, unique=True)  # public id, e.g. "haircut"
    name: str
    price: Decimal = Field(max_digits=10, decimal_places=2)
    duration: int  # minutes
    status: str = ServiceStatus.active.value

    @property
    def is_active(self) -> bool:
        return self.status == ServiceStatus.active.value


class Appointment(SQLModel, table=True):
    # one active appointment per barber per start instant; cancelled rows stay
    __table_args__ = (
        Index(
            "uq_barber_active_start",
            "barber_id",
            "appointment_date",
            unique=True,
            sqlite_where=text("status IS NULL"),
            postgresql_where=text("status IS NULL"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    customer_id: int = Field(foreign_key="user.id", index=True)
    barber_id: int = Field(foreign_key="user.id", index=True)
    # aware UTC; SQLite reads come back naive, see core.from_storage
    appointment_date: datetime = Field(sa_type=DateTime(timezone=True), index=True)

    service_id: Optional[int] = Field(default=None, foreign_key="service.id")
    # snapshots taken at booking time
    service_type: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    duration: Optional[int] = None

    notes: Optional[str] = None
    status: Optional[str] = None  # None = active, "cancelled"
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    service: Optional[Service] = Relationship()
