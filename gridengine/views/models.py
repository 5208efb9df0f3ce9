# gridengine/views/models.py
"""View configuration and per-user page preference tables."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from gridengine.core.database import Base


class View(Base):
    """Named column selection for a module's grid."""

    __tablename__ = "views"
    __table_args__ = (UniqueConstraint("module", "view_name", name="uq_views_module_name"),)

    id = Column(Integer, primary_key=True, index=True)
    module = Column(String(50), nullable=False, index=True)
    view_name = Column(String(200), nullable=False)
    created_date = Column(DateTime, default=datetime.now)
    updated_date = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Only selected fields are stored, numbered 1..n
    fields = relationship(
        "ViewField",
        back_populates="view",
        cascade="all, delete-orphan",
        order_by="ViewField.display_order",
    )
    preferences = relationship("UserPagePreference", back_populates="view", cascade="all, delete-orphan")


class ViewField(Base):
    __tablename__ = "view_fields"

    id = Column(Integer, primary_key=True, index=True)
    view_id = Column(Integer, ForeignKey("views.id", ondelete="CASCADE"), nullable=False)
    field_name = Column(String(100), nullable=False)
    display_order = Column(Integer, nullable=False)

    view = relationship("View", back_populates="fields")


class UserPagePreference(Base):
    """Which view a user sees on a page. One row per (user, page); last write wins."""

    __tablename__ = "user_page_preferences"
    __table_args__ = (UniqueConstraint("user_id", "page_name", name="uq_user_page_preferences"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(50), nullable=False, index=True)
    page_name = Column(String(100), nullable=False)
    view_id = Column(Integer, ForeignKey("views.id", ondelete="CASCADE"), nullable=False)
    updated_date = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    view = relationship("View", back_populates="preferences")
