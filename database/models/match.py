import uuid

from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Float, JSON, UniqueConstraint, Index, func
from sqlalchemy.orm import relationship

from .base import Base


class MatchRecord(Base):
    """
    Stores the scored result of one (job, worker) evaluation.

    Tracks:
    - Aggregate score and the per-dimension breakdown
    - Weight profile used and any hard gates that zeroed the score
    - Notification status (PENDING -> NOTIFIED)

    One row per (job, worker); re-evaluation overwrites.
    """
    __tablename__ = 'job_match'

    id = Column(Text, primary_key=True, default=lambda: str(uuid.uuid4()))
    job_id = Column(Text, ForeignKey('job.id', ondelete='CASCADE'), nullable=False)
    worker_id = Column(Text, ForeignKey('worker.id', ondelete='CASCADE'), nullable=False)

    aggregate_score = Column(Float, nullable=False)

    skill_score = Column(Float, default=0.0)
    experience_score = Column(Float, default=0.0)
    location_score = Column(Float, default=0.0)
    salary_score = Column(Float, default=0.0)
    availability_score = Column(Float, default=0.0)

    weight_profile = Column(Text)
    gated_by = Column(JSON, default=list)
    details = Column(JSON, default=dict)

    status = Column(Text, nullable=False, default='PENDING')  # PENDING|NOTIFIED

    calculated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    job = relationship("JobRecord", back_populates="matches")

    __table_args__ = (
        UniqueConstraint('job_id', 'worker_id', name='uq_job_match_job_worker'),
        Index('idx_job_match_worker', 'worker_id'),
        Index('idx_job_match_score', 'aggregate_score'),
        Index('idx_job_match_status', 'status'),
    )
