from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from budgetsheet.services.money import Money

_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


class Category(BaseModel):
    id: str
    name: str
    icon: Optional[str] = None
    color: Optional[str] = None
    budget_limit: Optional[Money] = None
    is_custom: bool = False
    created_date: Optional[datetime] = None


def _valid_color(v: Optional[str]) -> Optional[str]:
    if v is not None and not _COLOR_RE.match(v):
        raise ValueError("color must be a hex value like #A1B2C3")
    return v


class CategoryIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    icon: str = Field("📦", max_length=16)
    color: str = "#747D8C"

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be blank")
        return v

    @field_validator("color")
    @classmethod
    def valid_color(cls, v: str) -> str:
        return _valid_color(v)


class CategoryUpdateIn(BaseModel):
    """Partial update; at least one field must be provided."""

    name: Optional[str] = Field(None, min_length=1, max_length=50)
    icon: Optional[str] = Field(None, max_length=16)
    color: Optional[str] = None

    @field_validator("color")
    @classmethod
    def valid_color(cls, v: Optional[str]) -> Optional[str]:
        return _valid_color(v)

    @model_validator(mode="after")
    def at_least_one(self) -> "CategoryUpdateIn":
        if self.name is None and self.icon is None and self.color is None:
            raise ValueError("at least one field must be provided for update")
        return self
