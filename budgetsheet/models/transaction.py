from __future__ import annotations

from datetime import date as Date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from budgetsheet.services.money import Money
from .category import Category
from .constants import MAX_DESCRIPTION_LENGTH

TransactionType = Literal["income", "expense"]


class RecurringConfig(BaseModel):
    frequency: Literal["daily", "weekly", "monthly", "yearly"]
    start_date: Date
    end_date: Optional[Date] = None
    day_of_month: Optional[int] = Field(None, ge=1, le=31)
    day_of_week: Optional[int] = Field(None, ge=0, le=6)

    @model_validator(mode="after")
    def window_order(self) -> "RecurringConfig":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class Transaction(BaseModel):
    id: str
    date: Date
    description: str = ""
    amount: Money
    category: Category
    type: TransactionType
    recurring: Optional[RecurringConfig] = None
    tags: List[str] = []


class TransactionIn(BaseModel):
    date: Date
    description: str = ""
    amount: Money
    category_id: str = Field(..., min_length=1)
    type: TransactionType
    recurring: Optional[RecurringConfig] = None
    tags: List[str] = []

    @field_validator("amount")
    @classmethod
    def positive_amount(cls, v: Money) -> Money:
        # direction lives in `type`, the stored amount is a magnitude
        if v.amount <= 0:
            raise ValueError("amount must be greater than zero")
        return v

    @field_validator("description")
    @classmethod
    def sanitize_description(cls, v: str) -> str:
        return v.strip()[:MAX_DESCRIPTION_LENGTH]

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: List[str]) -> List[str]:
        seen: List[str] = []
        for raw in v:
            tag = raw.strip()
            if not tag:
                continue
            if "," in tag:
                raise ValueError("tags cannot contain commas")
            if tag not in seen:
                seen.append(tag)
        return seen
