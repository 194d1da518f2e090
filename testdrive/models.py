# testdrive/models.py
"""SQLAlchemy ORM models for persisted entities.

Defines accounts (``User``), car listings (``Car``), test-drive requests and
testimonials, plus the enumerations their columns are restricted to.
"""
import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, Column, DateTime, Enum, Float, ForeignKey, Index, Integer, JSON, String, Text,
)
from sqlalchemy.orm import relationship

from .db import Base
from .utils import new_id


def utcnow():
    return datetime.now(timezone.utc)


class Role(str, enum.Enum):
    CAR_OWNER = "Car Owner"
    JOURNALIST = "Journalist"
    ADMIN = "Admin"


class RequestStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    COMPLETED = "Completed"


ACTIVE_STATUSES = (RequestStatus.PENDING, RequestStatus.APPROVED)


class Transmission(str, enum.Enum):
    AUTOMATIC = "Automatic"
    MANUAL = "Manual"
    SEMI_AUTOMATIC = "Semi-Automatic"
    CVT = "CVT"


class FuelType(str, enum.Enum):
    PETROL = "Petrol"
    DIESEL = "Diesel"
    ELECTRIC = "Electric"
    HYBRID = "Hybrid"
    PLUG_IN_HYBRID = "Plug-in Hybrid"
    LPG = "LPG"


def _enum_column(enum_cls, **kwargs):
    # persist the display values ("Car Owner"), not the member names
    return Column(
        Enum(enum_cls, values_callable=lambda e: [m.value for m in e],
             native_enum=False, length=20, validate_strings=True),
        **kwargs
    )


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class User(TimestampMixin, Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)  # stored lower-cased
    password_hash = Column(Text)
    role = _enum_column(Role, nullable=False)
    firebase_uid = Column(String(128), unique=True)

    phone = Column(Text)
    location = Column(Text)
    bio = Column(Text)
    profile_image = Column(Text)
    social_media = Column(JSON)
    journalist_info = Column(JSON)
    owner_info = Column(JSON)

    cars = relationship("Car", back_populates="owner")

    def __repr__(self):
        return f"<User {self.email} ({self.role.value})>"


class Car(TimestampMixin, Base):
    __tablename__ = "cars"
    id = Column(String(36), primary_key=True, default=new_id)
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    make = Column(Text, nullable=False)
    model = Column(Text, nullable=False)
    year = Column(Integer, nullable=False)
    color = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    mileage = Column(Integer, nullable=False)
    transmission = _enum_column(Transmission, nullable=False)
    fuel_type = _enum_column(FuelType, nullable=False)
    description = Column(Text, nullable=False)
    location = Column(Text, nullable=False)
    image = Column(Text)
    images = Column(JSON, default=list)
    is_available = Column(Boolean, nullable=False, default=True)

    owner = relationship("User", back_populates="cars")
    requests = relationship("TestDriveRequest", back_populates="car", passive_deletes=True)


Index("idx_cars_make_model", Car.make, Car.model)


class TestDriveRequest(TimestampMixin, Base):
    __tablename__ = "test_drive_requests"
    id = Column(String(36), primary_key=True, default=new_id)
    journalist_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    car_id = Column(String(36), ForeignKey("cars.id"), nullable=False, index=True)
    # copied from the car at creation time
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    requested_date_time = Column(DateTime(timezone=True))
    message = Column(Text)
    status = _enum_column(RequestStatus, nullable=False, default=RequestStatus.PENDING)
    owner_response = Column(Text)

    journalist = relationship("User", foreign_keys=[journalist_id])
    owner = relationship("User", foreign_keys=[owner_id])
    car = relationship("Car", back_populates="requests")


Index("idx_requests_journalist_status", TestDriveRequest.journalist_id, TestDriveRequest.status)
Index("idx_requests_owner_status", TestDriveRequest.owner_id, TestDriveRequest.status)
# at most one Pending/Approved request per (journalist, car)
Index(
    "uq_requests_active_journalist_car",
    TestDriveRequest.journalist_id,
    TestDriveRequest.car_id,
    unique=True,
    postgresql_where=TestDriveRequest.status.in_([s.value for s in ACTIVE_STATUSES]),
    sqlite_where=TestDriveRequest.status.in_([s.value for s in ACTIVE_STATUSES]),
)


class Testimonial(TimestampMixin, Base):
    __tablename__ = "testimonials"
    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    role = Column(Text, nullable=False)
    image = Column(Text, nullable=False)
    text = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
