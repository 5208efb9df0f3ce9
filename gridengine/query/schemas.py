"""
Request and result types for grid queries.

Criteria and sort keys arrive from HTTP requests and saved filters; the
composer's result is a plain dataclass so it can carry ORM rows or dict
snapshots alike.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FilterCriterion(BaseModel):
    """One ``field operator value`` condition. Criteria are AND-combined."""

    field_name: str
    operator: str
    value: Any = None

    model_config = ConfigDict(from_attributes=True)


class SortKey(BaseModel):
    field_name: str
    descending: bool = False


class GridQueryRequest(BaseModel):
    criteria: List[FilterCriterion] = []
    sort: List[SortKey] = []
    skip: int = 0
    take: int = 50
    saved_filter_id: Optional[int] = None
    named_filter: Optional[str] = None
    # Restricts the projected columns; all catalog fields when omitted
    fields: Optional[List[str]] = None


class GridQueryResponse(BaseModel):
    module: str
    items: List[Dict[str, Any]]
    total_count: int
    skip: int
    take: int = Field(description="Requested page size")


@dataclass
class QueryPage:
    """One page of a filtered, sorted result and the size of the filtered set."""

    items: List[Any] = field(default_factory=list)
    total_count: int = 0
