"""Data access for saved filters."""

from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from gridengine.core.base_dao import BaseDAO
from gridengine.filters.models import SavedFilter, SavedFilterCriterion
from gridengine.query.schemas import FilterCriterion


class SavedFilterDAO(BaseDAO[SavedFilter]):
    def __init__(self, db_session: Session):
        super().__init__(SavedFilter, db_session)

    def get_with_criteria(self, filter_id: int) -> Optional[SavedFilter]:
        stmt = (
            select(SavedFilter)
            .options(selectinload(SavedFilter.criteria))
            .where(SavedFilter.id == filter_id)
        )
        try:
            return self.db.execute(stmt).scalars().first()
        except SQLAlchemyError as e:
            raise self._storage_error("get_with_criteria", e, filter_id=filter_id) from e

    def get_by_module(self, module: str) -> List[SavedFilter]:
        stmt = (
            select(SavedFilter)
            .options(selectinload(SavedFilter.criteria))
            .where(SavedFilter.module == module)
            .order_by(SavedFilter.name, SavedFilter.id)
        )
        try:
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            raise self._storage_error("get_by_module", e, module=module) from e

    def name_exists(self, module: str, name: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(SavedFilter.id).where(SavedFilter.module == module, SavedFilter.name == name)
        if exclude_id is not None:
            stmt = stmt.where(SavedFilter.id != exclude_id)
        try:
            return self.db.execute(stmt).first() is not None
        except SQLAlchemyError as e:
            raise self._storage_error("name_exists", e, module=module) from e

    @staticmethod
    def build_criteria(criteria: Sequence[FilterCriterion]) -> List[SavedFilterCriterion]:
        """Criterion rows with values in JSON form: dates as ISO text, decimals as strings."""
        return [
            SavedFilterCriterion(
                position=position,
                field_name=c.field_name,
                operator=c.operator,
                value=c.model_dump(mode="json")["value"],
            )
            for position, c in enumerate(criteria)
        ]
