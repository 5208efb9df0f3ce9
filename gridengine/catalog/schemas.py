"""Pydantic schemas for the field catalog."""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict


class FieldType(str, Enum):
    """Semantic type of a catalog field; drives the legal comparison operators."""

    STRING = "string"
    NUMBER = "number"
    DECIMAL = "decimal"
    DATE = "date"
    BOOLEAN = "boolean"


class FieldDefinition(BaseModel):
    """A filterable, sortable, displayable field of one module."""

    module: str
    field_name: str
    label: str
    field_type: FieldType
    display_order: int = 0

    model_config = ConfigDict(from_attributes=True, frozen=True)


class ModuleSummary(BaseModel):
    module: str
    field_count: int
    pages: List[str] = []


class OperatorOption(BaseModel):
    """Comparison operator choice for filter-builder dropdowns."""

    value: str
    description: str
    requires_value: bool


class NamedFilterOption(BaseModel):
    """A preset filter a module offers by name."""

    module: str
    name: str
    criteria_count: int
