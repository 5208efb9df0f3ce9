# gridengine/core/base_dao.py
"""Generic base DAO for common database operations."""

import logging
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from gridengine.core.database import Base
from gridengine.core.exceptions import StorageError

ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)


class BaseDAO(Generic[ModelType]):
    """Generic DAO for common database operations.

    Every SQLAlchemy failure is rolled back and re-raised as ``StorageError``,
    except ``IntegrityError`` which is re-raised unchanged so services can
    translate constraint violations into ``ConflictError``.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        self.model = model
        self.db = db

    def _pk_column(self):
        return self.model.__mapper__.primary_key[0]

    def _conditions(self, filters: dict):
        return [
            getattr(self.model, key) == value
            for key, value in filters.items()
            if hasattr(self.model, key) and value is not None
        ]

    def get_all(self, **filters) -> List[ModelType]:
        """Get all records in storage order (primary key ascending)."""
        query = select(self.model)
        conditions = self._conditions(filters)
        if conditions:
            query = query.where(and_(*conditions))
        query = query.order_by(self._pk_column())
        try:
            return list(self.db.execute(query).scalars().all())
        except SQLAlchemyError as e:
            raise self._storage_error("get_all", e) from e

    def get_by_id(self, id: int) -> Optional[ModelType]:
        """Get record by ID."""
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            raise self._storage_error("get_by_id", e, id=id) from e

    def create(self, **data) -> ModelType:
        """Create new record."""
        db_obj = self.model(**data)
        self.db.add(db_obj)
        self.commit("create")
        self.db.refresh(db_obj)
        return db_obj

    def update(self, db_obj: ModelType, **data) -> ModelType:
        """Update existing record."""
        for field, value in data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        self.commit("update")
        self.db.refresh(db_obj)
        return db_obj

    def delete(self, id: int) -> bool:
        """Delete record by ID."""
        db_obj = self.get_by_id(id)
        if db_obj is None:
            return False
        self.db.delete(db_obj)
        self.commit("delete", id=id)
        return True

    # ===== TRANSACTION HELPERS =====

    def commit(self, operation: str, **context: Any) -> None:
        """Commit the session; roll back and translate on failure."""
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            raise self._storage_error(operation, e, **context) from e

    def flush(self, operation: str, **context: Any) -> None:
        """Flush pending changes, e.g. to obtain generated ids; failures are handled like ``commit``."""
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            raise self._storage_error(operation, e, **context) from e

    def _storage_error(self, operation: str, error: Exception, **context: Any) -> StorageError:
        logger.error(
            f"{self.model.__name__} {operation} failed: {error} (context={context})"
        )
        return StorageError(
            f"Storage failure during {operation} on {self.model.__name__}",
            original=error,
            operation=operation,
            model=self.model.__name__,
            **context,
        )
