"""SQLAlchemy-backed data access for users and tasks.

Services only see the small ``create / find_one / find / save / delete``
surface, so tests can hand them an in-memory stand-in instead.
"""

import logging
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from errors import ConflictError, InternalError
from models import Task, TaskStatus, User

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")

# SQLSTATE 23505 on postgres, error 1062 on mysql
_UNIQUE_VIOLATION_CODES = {"23505", 1062}


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code is None and getattr(orig, "args", None):
        code = orig.args[0]
    if code in _UNIQUE_VIOLATION_CODES:
        return True
    message = str(orig)
    return "UNIQUE constraint failed" in message or "Duplicate entry" in message


class SqlAlchemyRepository(Generic[ModelT]):
    model: Type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def create(self, **values: Any) -> ModelT:
        obj = self.model(**values)
        self.db.add(obj)
        self._commit()
        self.db.refresh(obj)
        return obj

    def save(self, obj: ModelT) -> ModelT:
        self.db.add(obj)
        self._commit()
        self.db.refresh(obj)
        return obj

    def find_one(self, **criteria: Any) -> Optional[ModelT]:
        try:
            return self.db.query(self.model).filter_by(**criteria).first()
        except SQLAlchemyError as exc:
            logger.exception("Lookup on %s failed", self.model.__tablename__)
            raise InternalError() from exc

    def find(self, **criteria: Any) -> List[ModelT]:
        try:
            return self.db.query(self.model).filter_by(**criteria).order_by(self.model.id).all()
        except SQLAlchemyError as exc:
            logger.exception("Query on %s failed", self.model.__tablename__)
            raise InternalError() from exc

    def delete(self, **criteria: Any) -> int:
        """Delete every row matching ``criteria`` and return how many went."""
        try:
            affected = self.db.query(self.model).filter_by(**criteria).delete(synchronize_session=False)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Delete on %s failed", self.model.__tablename__)
            raise InternalError() from exc
        self._commit()
        return affected

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if is_unique_violation(exc):
                raise ConflictError() from exc
            logger.exception("Integrity error writing %s", self.model.__tablename__)
            raise InternalError() from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Write to %s failed", self.model.__tablename__)
            raise InternalError() from exc


class UserRepository(SqlAlchemyRepository[User]):
    model = User


class TaskRepository(SqlAlchemyRepository[Task]):
    model = Task

    def search(
        self,
        owner_id: int,
        status: Optional[TaskStatus] = None,
        term: Optional[str] = None,
    ) -> List[Task]:
        query = self.db.query(Task).filter(Task.owner_id == owner_id)
        if status is not None:
            query = query.filter(Task.status == status)
        if term:
            pattern = f"%{_escape_like(term)}%"
            query = query.filter(
                or_(
                    Task.title.ilike(pattern, escape="\\"),
                    Task.description.ilike(pattern, escape="\\"),
                )
            )
        try:
            return query.order_by(Task.id).all()
        except SQLAlchemyError as exc:
            logger.exception(
                "Failed to get tasks for user %s (status=%s, search=%r)", owner_id, status, term
            )
            raise InternalError() from exc


def _escape_like(term: str) -> str:
    # "%" and "_" in a search term are literal characters
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
