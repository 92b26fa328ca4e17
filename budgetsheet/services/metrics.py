from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import TYPE_CHECKING, Dict, Iterable, List, Literal, Optional, Sequence, Tuple, Union

from budgetsheet.services.money import Currency, Money, convert, quantize, total, zero

if TYPE_CHECKING:  # pragma: no cover
    from budgetsheet.models.budget import BudgetGoal
    from budgetsheet.models.savings import SavingsGoal
    from budgetsheet.models.transaction import Transaction

"""Derived metrics for goals and spending.

Scopes implemented:
    - Period windows for budget goals (daily / weekly / monthly)
    - Budget progress and status
    - Savings progress and time-to-target projection
    - Category breakdown with previous-window trend
    - Monthly summary (income vs expenses, month over month)

Design notes:
    Everything here is pure: entities and an optional ``as_of`` day in, frozen
    dataclasses out. Currency normalization always goes through
    ``services.money.convert`` with the rate passed by the caller.
"""

BudgetStatus = Literal["active", "achieved", "exceeded"]
Trend = Literal["up", "down", "stable"]


def _pct(part: float, whole: float) -> float:
    return (part / whole) * 100 if whole else 0.0


# ---------------- Period windows -----------------
def period_window(period: str, as_of: date) -> Tuple[date, date]:
    """Return the inclusive [start, end] window containing ``as_of``.

    Weeks run Sunday through Saturday.
    """
    if period == "daily":
        return as_of, as_of
    if period == "weekly":
        start = as_of - timedelta(days=(as_of.weekday() + 1) % 7)
        return start, start + timedelta(days=6)
    if period == "monthly":
        last = calendar.monthrange(as_of.year, as_of.month)[1]
        return as_of.replace(day=1), as_of.replace(day=last)
    raise ValueError(f"unsupported budget period '{period}'")


def previous_window(start: date, end: date) -> Tuple[date, date]:
    """Shift an inclusive window back by its own length in days."""
    length = (end - start).days + 1
    return start - timedelta(days=length), end - timedelta(days=length)


def month_window(month: str) -> Tuple[date, date]:
    year, mon = (int(p) for p in month.split("-"))
    return period_window("monthly", date(year, mon, 1))


def in_window(d: date, start: Optional[date], end: Optional[date]) -> bool:
    if start is not None and d < start:
        return False
    if end is not None and d > end:
        return False
    return True


# ---------------- Budget progress -----------------
@dataclass(frozen=True)
class BudgetProgress:
    spent: Money
    percentage: float
    display_percentage: float
    remaining: Money
    status: BudgetStatus


def budget_status(spent: float, limit: float) -> BudgetStatus:
    """Reaching the limit exactly is achieved; only going past it is exceeded.

    Compares amounts already rounded to the currency's minor unit.
    """
    if spent > limit:
        return "exceeded"
    if spent == limit:
        return "achieved"
    return "active"


def budget_progress(
    goal: "BudgetGoal",
    transactions: Iterable["Transaction"],
    rate: Optional[float] = None,
) -> BudgetProgress:
    currency = goal.limit.currency
    spent = quantize(total(
        (
            t.amount
            for t in transactions
            if t.type == "expense"
            and t.category.id == goal.category.id
            and in_window(t.date, goal.start_date, goal.end_date)
        ),
        currency,
        rate,
    ))
    limit = quantize(goal.limit).amount
    if limit > 0:
        percentage = _pct(spent.amount, limit)
        status = budget_status(spent.amount, limit)
    else:
        # a zero ceiling is breached by any spending at all
        percentage = 0.0 if spent.amount <= 0 else 100.0
        status = "active" if spent.amount <= 0 else "exceeded"
    return BudgetProgress(
        spent=spent,
        percentage=percentage,
        display_percentage=min(percentage, 100.0),
        remaining=quantize(Money(amount=max(limit - spent.amount, 0.0), currency=currency)),
        status=status,
    )


# ---------------- Savings progress -----------------
@dataclass(frozen=True)
class SavingsProgress:
    saved: Money
    percentage: float
    remaining: Money
    is_completed: bool


def savings_progress(
    goal: "SavingsGoal",
    contributions: Sequence[Money] = (),
    rate: Optional[float] = None,
) -> SavingsProgress:
    currency = goal.target_amount.currency
    saved = quantize(total([goal.current_amount, *contributions], currency, rate))
    target = quantize(goal.target_amount).amount
    raw_pct = _pct(saved.amount, target) if target > 0 else 100.0
    return SavingsProgress(
        saved=saved,
        percentage=min(raw_pct, 100.0),
        remaining=quantize(Money(amount=max(target - saved.amount, 0.0), currency=currency)),
        is_completed=saved.amount >= target,
    )


# ---------------- Time to target -----------------
@dataclass(frozen=True)
class TimeToTarget:
    days_remaining: int
    daily_required: Money


def days_until(target: date, as_of: date) -> int:
    return (target - as_of).days


def time_to_target(
    goal: "SavingsGoal",
    as_of: Optional[date] = None,
    rate: Optional[float] = None,
) -> Union[TimeToTarget, Literal["overdue"], None]:
    """Project the daily saving needed to hit ``goal.target_date``.

    Returns None without a target date and "overdue" once the date has passed
    on an incomplete goal. On the target date itself ``days_remaining`` is 0
    and the whole remainder is due that day.
    """
    if goal.target_date is None:
        return None
    as_of = as_of or date.today()
    progress = savings_progress(goal, rate=rate)
    days = days_until(goal.target_date, as_of)
    currency = goal.target_amount.currency
    if progress.is_completed:
        return TimeToTarget(days_remaining=max(days, 0), daily_required=zero(currency))
    if days < 0:
        return "overdue"
    if days == 0:
        return TimeToTarget(days_remaining=0, daily_required=progress.remaining)
    return TimeToTarget(
        days_remaining=days,
        daily_required=Money(amount=progress.remaining.amount / days, currency=currency),
    )


# ---------------- Category breakdown -----------------
@dataclass(frozen=True)
class CategoryBreakdownItem:
    category_id: str
    total_spent: Money
    transaction_count: int
    average_transaction: Money
    percentage: float
    previous_total: Money
    change_percentage: float
    trend: Trend


def _expense_totals(
    transactions: Iterable["Transaction"],
    start: date,
    end: date,
    currency: Currency,
    rate: Optional[float],
) -> Dict[str, List[float]]:
    buckets: Dict[str, List[float]] = defaultdict(list)
    for t in transactions:
        if t.type != "expense" or not in_window(t.date, start, end):
            continue
        buckets[t.category.id].append(convert(t.amount, currency, rate).amount)
    return buckets


def change_percentage(current: float, previous: float) -> float:
    if previous > 0:
        return (current - previous) / previous * 100
    return 100.0 if current > 0 else 0.0


def _trend(change: float) -> Trend:
    if change > 0:
        return "up"
    if change < 0:
        return "down"
    return "stable"


def category_breakdown(
    transactions: Sequence["Transaction"],
    start: date,
    end: date,
    currency: Currency = Currency.USD,
    rate: Optional[float] = None,
) -> List[CategoryBreakdownItem]:
    """Per-category expense totals for [start, end], largest first.

    Trend compares against the preceding window of the same length
    (a 10-day window compares to the 10 days before it).
    """
    if start > end:
        raise ValueError("start date cannot be after end date")
    current = _expense_totals(transactions, start, end, currency, rate)
    prev_start, prev_end = previous_window(start, end)
    previous = _expense_totals(transactions, prev_start, prev_end, currency, rate)
    grand = sum(sum(v) for v in current.values())

    items: List[CategoryBreakdownItem] = []
    for category_id, amounts in current.items():
        spent = sum(amounts)
        prev = sum(previous.get(category_id, []))
        change = change_percentage(spent, prev)
        items.append(
            CategoryBreakdownItem(
                category_id=category_id,
                total_spent=Money(amount=spent, currency=currency),
                transaction_count=len(amounts),
                average_transaction=Money(amount=spent / len(amounts), currency=currency),
                percentage=_pct(spent, grand),
                previous_total=Money(amount=prev, currency=currency),
                change_percentage=change,
                trend=_trend(change),
            )
        )
    items.sort(key=lambda i: (-i.total_spent.amount, i.category_id))
    return items


# ---------------- Monthly summary -----------------
@dataclass(frozen=True)
class MonthlySummary:
    month: str
    total_income: Money
    total_expenses: Money
    remaining: Money
    breakdown: List[CategoryBreakdownItem] = field(default_factory=list)
    income_change: float = 0.0
    expense_change: float = 0.0


def _sum_type(
    transactions: Iterable["Transaction"],
    kind: str,
    start: date,
    end: date,
    currency: Currency,
    rate: Optional[float],
) -> Money:
    return total(
        (t.amount for t in transactions if t.type == kind and in_window(t.date, start, end)),
        currency,
        rate,
    )


def monthly_summary(
    transactions: Sequence["Transaction"],
    month: str,
    currency: Currency = Currency.USD,
    rate: Optional[float] = None,
) -> MonthlySummary:
    """Income vs expenses for a calendar month, compared with the month before."""
    start, end = month_window(month)
    prev_start, prev_end = period_window("monthly", start - timedelta(days=1))
    income = _sum_type(transactions, "income", start, end, currency, rate)
    expenses = _sum_type(transactions, "expense", start, end, currency, rate)
    prev_income = _sum_type(transactions, "income", prev_start, prev_end, currency, rate)
    prev_expenses = _sum_type(transactions, "expense", prev_start, prev_end, currency, rate)
    return MonthlySummary(
        month=month,
        total_income=income,
        total_expenses=expenses,
        remaining=Money(amount=income.amount - expenses.amount, currency=currency),
        breakdown=category_breakdown(transactions, start, end, currency, rate),
        income_change=change_percentage(income.amount, prev_income.amount),
        expense_change=change_percentage(expenses.amount, prev_expenses.amount),
    )
