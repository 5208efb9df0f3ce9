# gridengine/filters/models.py
"""Saved filter tables."""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from gridengine.core.database import Base


class SavedFilter(Base):
    """Named, reusable set of criteria owned by one module."""

    __tablename__ = "saved_filters"
    __table_args__ = (UniqueConstraint("module", "name", name="uq_saved_filters_module_name"),)

    id = Column(Integer, primary_key=True, index=True)
    module = Column(String(50), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    created_date = Column(DateTime, default=datetime.now)
    updated_date = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    criteria = relationship(
        "SavedFilterCriterion",
        back_populates="saved_filter",
        cascade="all, delete-orphan",
        order_by="SavedFilterCriterion.position",
    )


class SavedFilterCriterion(Base):
    __tablename__ = "saved_filter_criteria"

    id = Column(Integer, primary_key=True, index=True)
    saved_filter_id = Column(Integer, ForeignKey("saved_filters.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    field_name = Column(String(100), nullable=False)
    operator = Column(String(30), nullable=False)
    value = Column(JSON, nullable=True)  # scalar, or a [from, to] pair for "between"

    saved_filter = relationship("SavedFilter", back_populates="criteria")
