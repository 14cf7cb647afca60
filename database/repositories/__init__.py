from database.repositories.base import BaseRepository
from database.repositories.job import JobRepository
from database.repositories.worker import WorkerRepository
from database.repositories.availability import AvailabilityRepository
from database.repositories.match import MatchRepository

__all__ = [
    'BaseRepository',
    'JobRepository',
    'WorkerRepository',
    'AvailabilityRepository',
    'MatchRepository',
]
