"""Data access for the field catalog."""

from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gridengine.catalog.models import DisplayField
from gridengine.core.base_dao import BaseDAO


class DisplayFieldDAO(BaseDAO[DisplayField]):
    """Reads whole module field lists; there is deliberately no single-field query."""

    def __init__(self, db_session: Session):
        super().__init__(DisplayField, db_session)

    def get_fields_for_module(self, module: str) -> List[DisplayField]:
        stmt = (
            select(DisplayField)
            .where(DisplayField.module == module)
            .order_by(DisplayField.display_order, DisplayField.id)
        )
        try:
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            raise self._storage_error("get_fields_for_module", e, module=module) from e
