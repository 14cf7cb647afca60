import contextlib
import logging

from database.database import SessionLocal
from database.repository import SqlMatchingRepository

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def matching_uow():
    """Per-unit-of-work transaction scope.

    Yields a SqlMatchingRepository bound to a fresh Session. Commits on
    success, rolls back on exception, always closes.

    Usage:
        with matching_uow() as repo:
            batch = MatchService(repo, orchestrator).match_job(job_id)
        # saved matches and status updates commit on successful exit
    """
    session = SessionLocal()
    try:
        repo = SqlMatchingRepository(session)
        yield repo
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
