"""Data access for views and user page preferences."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from gridengine.core.base_dao import BaseDAO
from gridengine.views.models import UserPagePreference, View


class ViewDAO(BaseDAO[View]):
    def __init__(self, db_session: Session):
        super().__init__(View, db_session)

    def get_with_fields(self, view_id: int) -> Optional[View]:
        stmt = select(View).options(selectinload(View.fields)).where(View.id == view_id)
        try:
            return self.db.execute(stmt).scalars().first()
        except SQLAlchemyError as e:
            raise self._storage_error("get_with_fields", e, view_id=view_id) from e

    def get_by_module(self, module: str) -> List[View]:
        stmt = select(View).where(View.module == module).order_by(View.view_name, View.id)
        try:
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            raise self._storage_error("get_by_module", e, module=module) from e

    def name_exists(self, module: str, view_name: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(View.id).where(View.module == module, View.view_name == view_name)
        if exclude_id is not None:
            stmt = stmt.where(View.id != exclude_id)
        try:
            return self.db.execute(stmt).first() is not None
        except SQLAlchemyError as e:
            raise self._storage_error("name_exists", e, module=module) from e


class UserPagePreferenceDAO(BaseDAO[UserPagePreference]):
    def __init__(self, db_session: Session):
        super().__init__(UserPagePreference, db_session)

    def get_for_user(self, user_id: str) -> List[UserPagePreference]:
        stmt = select(UserPagePreference).where(UserPagePreference.user_id == user_id)
        try:
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            raise self._storage_error("get_for_user", e, user_id=user_id) from e

    def get_for_user_page(self, user_id: str, page_name: str) -> Optional[UserPagePreference]:
        stmt = select(UserPagePreference).where(
            UserPagePreference.user_id == user_id,
            UserPagePreference.page_name == page_name,
        )
        try:
            return self.db.execute(stmt).scalars().first()
        except SQLAlchemyError as e:
            raise self._storage_error("get_for_user_page", e, user_id=user_id, page=page_name) from e

    def get_for_view(self, view_id: int) -> List[UserPagePreference]:
        stmt = select(UserPagePreference).where(UserPagePreference.view_id == view_id)
        try:
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            raise self._storage_error("get_for_view", e, view_id=view_id) from e
