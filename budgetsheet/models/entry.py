from __future__ import annotations

import re
from datetime import date as Date
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from budgetsheet.services.money import Currency, Money

_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def valid_month(v: str) -> str:
    if not _MONTH_RE.match(v):
        raise ValueError("month must be formatted YYYY-MM")
    return v


class BudgetEntryItem(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    amount: Money
    category: Optional[str] = None

    @field_validator("amount")
    @classmethod
    def positive_amount(cls, v: Money) -> Money:
        if v.amount <= 0:
            raise ValueError("item amount must be greater than zero")
        return v


class BudgetEntryIn(BaseModel):
    """One month's income plus the spending items recorded against it."""

    date: Date
    month: str
    total_income: float = Field(..., ge=0)
    currency: Currency
    items: List[BudgetEntryItem] = Field(..., min_length=1)

    @field_validator("month")
    @classmethod
    def month_format(cls, v: str) -> str:
        return valid_month(v)


class BudgetEntryResult(BaseModel):
    total_spending: Money
    remaining: Money
    entries_added: int


class BudgetEntryRow(BaseModel):
    index: int
    date: str
    month: str
    total_income: float
    currency: str
    item_name: str
    item_amount: float
    item_currency: str
    category: str
    remaining: float
