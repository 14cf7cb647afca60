import uuid

from sqlalchemy import Column, Text, TIMESTAMP, DateTime, Float, JSON, Index, func
from sqlalchemy.orm import relationship

from .base import Base


class JobRecord(Base):
    """
    A job posting. Read-only from the matching engine's side.
    """
    __tablename__ = 'job'

    id = Column(Text, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(Text)

    required_skills = Column(JSON, default=list)
    required_experience_years = Column(Float, nullable=False, default=0.0)

    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    salary_min = Column(Float, nullable=True)
    salary_max = Column(Float, nullable=True)
    salary_currency = Column(Text, nullable=True)

    status = Column(Text, nullable=False, default='active')  # active|closed

    # Commitment window checked against worker availability
    schedule_start = Column(DateTime, nullable=True)
    schedule_end = Column(DateTime, nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    matches = relationship("MatchRecord", back_populates="job", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_job_status', 'status'),
    )
