# barbershop/schemas.py

from pydantic import BaseModel, ConfigDict, Field
from enum import Enum
from datetime import datetime, date
from decimal import Decimal
from typing import List, Optional


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRole(str, Enum):
    barber = "barber"
    customer = "customer"


class UserPublic(BaseModel):
    id: int
    email: str
    name: str
    role: UserRole


class UserCreate(BaseModel):
    email: str
    name: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=8, max_length=72)
    role: UserRole


class BarberPublic(BaseModel):
    id: int
    name: str


# Schedules: dates and clock times stay strings so malformed values are
# reported by the schedule store as format errors.
class ScheduleCreate(BaseModel):
    date: str  # YYYY-MM-DD
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    is_active: bool = True


class ScheduleUpdate(BaseModel):
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_active: Optional[bool] = None


class SchedulePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    barber_id: int
    date: date
    start_time: str
    end_time: str
    is_active: bool


class ScheduleResponse(BaseModel):
    schedule: Optional[SchedulePublic]


class AvailabilityResponse(BaseModel):
    barber_id: int
    date: date
    service_id: Optional[str] = None
    available_starts: List[str]


class AppointmentCreate(BaseModel):
    barber_id: int
    appointment_date: str  # ISO-8601
    service_id: Optional[str] = None
    price: Optional[Decimal] = None
    notes: Optional[str] = Field(default=None, max_length=500)


class StatusUpdate(BaseModel):
    status: str


class BarberInfo(BaseModel):
    id: int
    name: str


class AppointmentPublic(BaseModel):
    id: int
    customer_id: int
    barber_id: int
    appointment_date: datetime
    service_id: Optional[str] = None
    service_type: Optional[str] = None
    price: Optional[float] = None
    duration: Optional[int] = None
    notes: Optional[str] = None
    status: Optional[str] = None
    barber: BarberInfo


class ServiceCreate(BaseModel):
    id: str = Field(min_length=1, max_length=50, pattern=r"^[a-z0-9_]+$")
    name: str = Field(min_length=1, max_length=100)
    price: Decimal
    duration: int


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    price: Optional[Decimal] = None
    duration: Optional[int] = None


class ServicePublic(BaseModel):
    id: str
    name: str
    price: float
    duration: int
    is_active: bool


class MessageResponse(BaseModel):
    message: str
