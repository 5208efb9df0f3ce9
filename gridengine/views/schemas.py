"""Pydantic schemas for view configurations."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

# Order given to fields that are not part of a view's selection.
UNSELECTED_DISPLAY_ORDER = 9999

DEFAULT_VIEW_NAME = "Default"


class ViewFieldSelection(BaseModel):
    field_name: str
    is_selected: bool = True
    display_order: int = 0

    model_config = ConfigDict(from_attributes=True)


class ViewConfiguration(BaseModel):
    """A resolved view. ``view_id`` is ``None`` for the synthesised default view."""

    view_id: Optional[int] = None
    module: str
    view_name: str
    fields: List[ViewFieldSelection] = []

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_default(self) -> bool:
        return self.view_id is None

    def selected_field_names(self) -> List[str]:
        return [f.field_name for f in self.fields if f.is_selected]


class ViewSummary(BaseModel):
    view_id: int
    module: str
    view_name: str

    model_config = ConfigDict(from_attributes=True)


def clean_view_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("View name cannot be empty")
    if len(value) > 200:
        raise ValueError("View name cannot exceed 200 characters")
    return value


class ViewConfigurationCreate(BaseModel):
    module: str
    view_name: str
    fields: List[ViewFieldSelection]

    @field_validator("view_name")
    @classmethod
    def validate_view_name(cls, v: str) -> str:
        return clean_view_name(v)


class ViewConfigurationUpdate(BaseModel):
    view_name: Optional[str] = None
    fields: Optional[List[ViewFieldSelection]] = None

    @field_validator("view_name")
    @classmethod
    def validate_view_name(cls, v: Optional[str]) -> Optional[str]:
        return clean_view_name(v)


class UserPageViewRequest(BaseModel):
    """Body of a user page update.

    With ``view_id`` the user is pointed at an existing view (whose fields are
    replaced when ``fields`` is given). Without it a new view is created, named
    ``view_name`` or a generated per-user name.
    """

    view_id: Optional[int] = None
    view_name: Optional[str] = None
    fields: Optional[List[ViewFieldSelection]] = None

    @field_validator("view_name")
    @classmethod
    def validate_view_name(cls, v: Optional[str]) -> Optional[str]:
        return clean_view_name(v)
