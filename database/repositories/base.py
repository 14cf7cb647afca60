from typing import Any, Optional

from sqlalchemy.orm import Session


class BaseRepository:
    """Per-table repository sharing the unit of work's Session.

    Transactions belong to the caller (SqlMatchingRepository / matching_uow);
    repositories only add and flush.
    """

    def __init__(self, db: Session):
        self.db = db

    def _get_or_add(self, model: type, key: Optional[Any], **fields):
        """Row with primary key `key`, or a new pending row built from `fields`."""
        row = self.db.get(model, key) if key is not None else None
        if row is None:
            row = model(**fields)
            self.db.add(row)
        return row
