from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict

from budgetsheet.services.money import Money


class CategoryBreakdownOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category_id: str
    category_name: str = ""
    total_spent: Money
    transaction_count: int
    average_transaction: Money
    percentage: float
    previous_total: Money
    change_percentage: float
    trend: Literal["up", "down", "stable"]


class MonthlySummaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month: str
    total_income: Money
    total_expenses: Money
    remaining: Money
    breakdown: List[CategoryBreakdownOut] = []
    income_change: float
    expense_change: float


class AlertOut(BaseModel):
    type: Literal["budget_exceeded", "budget_warning", "goal_completed"]
    goal_id: str
    priority: Literal["high", "medium", "low"]
    percentage: float
    message: str
