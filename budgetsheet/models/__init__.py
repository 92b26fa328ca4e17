"""Pydantic domain models for the budget tracker."""

from .constants import (
    BUILTIN_CATEGORIES,
    BUILTIN_CATEGORY_IDS,
    CUSTOM_CATEGORY_PREFIX,
    FALLBACK_CATEGORY_ID,
)  # re-export
from .category import Category, CategoryIn, CategoryUpdateIn
from .transaction import RecurringConfig, Transaction, TransactionIn
from .budget import BudgetGoal, BudgetGoalIn, BudgetGoalUpdateIn, BudgetGoalOut
from .savings import SavingsGoal, SavingsGoalIn, SavingsGoalUpdateIn, SavingsGoalOut
from .entry import BudgetEntryIn, BudgetEntryItem, BudgetEntryRow
from .identity import Identity
from .report import AlertOut, CategoryBreakdownOut, MonthlySummaryOut

__all__ = [
    "BUILTIN_CATEGORIES",
    "BUILTIN_CATEGORY_IDS",
    "CUSTOM_CATEGORY_PREFIX",
    "FALLBACK_CATEGORY_ID",
    "Category",
    "CategoryIn",
    "CategoryUpdateIn",
    "RecurringConfig",
    "Transaction",
    "TransactionIn",
    "BudgetGoal",
    "BudgetGoalIn",
    "BudgetGoalUpdateIn",
    "BudgetGoalOut",
    "SavingsGoal",
    "SavingsGoalIn",
    "SavingsGoalUpdateIn",
    "SavingsGoalOut",
    "BudgetEntryIn",
    "BudgetEntryItem",
    "BudgetEntryRow",
    "Identity",
    "AlertOut",
    "CategoryBreakdownOut",
    "MonthlySummaryOut",
]
