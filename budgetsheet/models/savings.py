from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from budgetsheet.services.money import Money


class SavingsGoal(BaseModel):
    """Target amount to accumulate. ``current_amount`` is the stored progress."""

    id: str
    name: str
    target_amount: Money
    current_amount: Money
    target_date: Optional[date] = None
    description: Optional[str] = None
    created_date: Optional[datetime] = None


class SavingsGoalIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    target_amount: Money
    target_date: Optional[date] = None
    description: str = Field("", max_length=500)

    @field_validator("target_amount")
    @classmethod
    def positive_target(cls, v: Money) -> Money:
        if v.amount <= 0:
            raise ValueError("target amount must be greater than zero")
        return v


class SavingsGoalUpdateIn(BaseModel):
    """Partial update. ``current_amount`` overwrites stored progress.

    An explicit ``target_date: null`` removes the deadline; omitting it keeps it.
    """

    current_amount: Optional[Money] = None
    target_amount: Optional[Money] = None
    target_date: Optional[date] = None
    name: Optional[str] = Field(None, min_length=1, max_length=100)

    @field_validator("current_amount")
    @classmethod
    def non_negative_current(cls, v: Optional[Money]) -> Optional[Money]:
        if v is not None and v.amount < 0:
            raise ValueError("current amount cannot be negative")
        return v

    @field_validator("target_amount")
    @classmethod
    def positive_target(cls, v: Optional[Money]) -> Optional[Money]:
        if v is not None and v.amount <= 0:
            raise ValueError("target amount must be greater than zero")
        return v

    @model_validator(mode="after")
    def at_least_one(self) -> "SavingsGoalUpdateIn":
        provided = any(
            getattr(self, f) is not None for f in ("current_amount", "target_amount", "name")
        )
        if not provided and "target_date" not in self.model_fields_set:
            raise ValueError("at least one field must be provided for update")
        return self


class ContributionIn(BaseModel):
    amount: Money

    @field_validator("amount")
    @classmethod
    def positive_amount(cls, v: Money) -> Money:
        if v.amount <= 0:
            raise ValueError("contribution must be greater than zero")
        return v


class SavingsProgressOut(BaseModel):
    saved: Money
    percentage: float
    remaining: Money
    is_completed: bool


class TimeToTargetOut(BaseModel):
    days_remaining: int
    daily_required: Money


class SavingsGoalOut(SavingsGoal):
    progress: SavingsProgressOut
    time_to_target: Union[TimeToTargetOut, Literal["overdue"], None] = None
