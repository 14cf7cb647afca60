from .base import Base
from .worker import WorkerRecord, AvailabilityRecord
from .job import JobRecord
from .match import MatchRecord

__all__ = [
    'Base',
    'WorkerRecord',
    'AvailabilityRecord',
    'JobRecord',
    'MatchRecord',
]
