"""Pydantic schemas for saved filters."""

from typing import List

from pydantic import BaseModel, ConfigDict, field_validator

from gridengine.query.schemas import FilterCriterion


def clean_filter_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Filter name cannot be empty")
    if len(value) > 100:
        raise ValueError("Filter name cannot exceed 100 characters")
    return value


class SavedFilterCreate(BaseModel):
    module: str
    name: str
    criteria: List[FilterCriterion] = []

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return clean_filter_name(v)


class SavedFilterUpdate(BaseModel):
    name: str
    criteria: List[FilterCriterion] = []

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return clean_filter_name(v)


class SavedFilterRead(BaseModel):
    id: int
    module: str
    name: str
    criteria: List[FilterCriterion] = []

    model_config = ConfigDict(from_attributes=True)
