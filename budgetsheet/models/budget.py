from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from budgetsheet.services.money import Money
from .category import Category

BudgetPeriod = Literal["daily", "weekly", "monthly"]
BudgetStatus = Literal["active", "achieved", "exceeded"]


def _positive_limit(v: Optional[Money]) -> Optional[Money]:
    if v is not None and v.amount <= 0:
        raise ValueError("limit must be greater than zero")
    return v


class BudgetGoal(BaseModel):
    """Spending ceiling for a category over the current period window.

    Spent is never stored here; it is derived from transactions at query time.
    """

    id: str
    name: str
    category: Category
    limit: Money
    period: BudgetPeriod
    start_date: date
    end_date: date
    alert_threshold: Optional[int] = Field(None, ge=1, le=100)
    created_date: Optional[datetime] = None


class BudgetGoalIn(BaseModel):
    category_id: str = Field(..., min_length=1)
    limit: Money
    period: BudgetPeriod = "monthly"

    @field_validator("limit")
    @classmethod
    def positive_limit(cls, v: Money) -> Money:
        return _positive_limit(v)


class BudgetGoalUpdateIn(BaseModel):
    limit: Optional[Money] = None
    period: Optional[BudgetPeriod] = None

    @field_validator("limit")
    @classmethod
    def positive_limit(cls, v: Optional[Money]) -> Optional[Money]:
        return _positive_limit(v)

    @model_validator(mode="after")
    def at_least_one(self) -> "BudgetGoalUpdateIn":
        if self.limit is None and self.period is None:
            raise ValueError("at least one field must be provided for update")
        return self


class BudgetProgressOut(BaseModel):
    spent: Money
    percentage: float
    display_percentage: float
    remaining: Money
    status: BudgetStatus


class BudgetGoalOut(BudgetGoal):
    progress: BudgetProgressOut
