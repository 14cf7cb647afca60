import uuid

from sqlalchemy import Column, Text, TIMESTAMP, DateTime, ForeignKey, Boolean, Integer, Float, JSON, Index, func
from sqlalchemy.orm import relationship

from .base import Base


class WorkerRecord(Base):
    """
    A worker profile as stored by the profile layer.

    Skills, experience, location and salary feed scoring; the engine
    only reads them.
    """
    __tablename__ = 'worker'

    id = Column(Text, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(Text)

    skills = Column(JSON, default=list)
    experience_years = Column(Float, nullable=True)

    # Preferred work location; either both set or treated as unknown
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    salary_expected = Column(Float, nullable=True)
    salary_currency = Column(Text, nullable=True)

    status = Column(Text, nullable=False, default='active')  # active|inactive

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    availability = relationship("AvailabilityRecord", back_populates="worker", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_worker_status', 'status'),
    )


class AvailabilityRecord(Base):
    """
    One availability declaration of a worker.

    Never hard-deleted while matches reference the worker; status is the
    soft lifecycle (ACTIVE, INACTIVE, EXPIRED). The recurrence rule is kept
    as a JSON document:
        {pattern, interval, days_of_week, day_of_month,
         start_date, end_date, count, exceptions}
    """
    __tablename__ = 'availability'

    id = Column(Text, primary_key=True, default=lambda: str(uuid.uuid4()))
    worker_id = Column(Text, ForeignKey('worker.id', ondelete='CASCADE'), nullable=False)

    type = Column(Text, nullable=False, default='AVAILABLE')
    status = Column(Text, nullable=False, default='ACTIVE')
    title = Column(Text)

    # Local wall-clock times in the entry's timezone
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=True)
    is_all_day = Column(Boolean, nullable=False, default=True)
    time_slots = Column(JSON, default=list)  # [{"start_time": "09:00", "end_time": "17:00"}]
    timezone = Column(Text, nullable=False, default='UTC')

    is_recurring = Column(Boolean, nullable=False, default=False)
    recurrence = Column(JSON, nullable=True)

    priority = Column(Integer, nullable=False, default=5)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    worker = relationship("WorkerRecord", back_populates="availability")

    __table_args__ = (
        Index('idx_availability_worker_dates', 'worker_id', 'start_date', 'end_date'),
        Index('idx_availability_worker_type_status', 'worker_id', 'type', 'status'),
        Index('idx_availability_worker_recurring', 'worker_id', 'is_recurring'),
    )
