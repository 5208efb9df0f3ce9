"""Field catalog table."""

from sqlalchemy import Column, Integer, String, UniqueConstraint

from gridengine.core.database import Base


class DisplayField(Base):
    """A field of a grid module. Seeded at deployment, read-only at runtime."""

    __tablename__ = "display_fields"
    __table_args__ = (UniqueConstraint("module", "field_name", name="uq_display_fields_module_field"),)

    id = Column(Integer, primary_key=True, index=True)
    module = Column(String(50), nullable=False, index=True)
    field_name = Column(String(100), nullable=False)
    label = Column(String(150), nullable=False)
    field_type = Column(String(20), nullable=False)  # string, number, decimal, date, boolean
    display_order = Column(Integer, nullable=False, default=0)
