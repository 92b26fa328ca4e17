"""Spreadsheet layouts and row <-> entity mapping.

Each entity kind lives in its own spreadsheet (``<prefix>_<Title>``) with a
single worksheet whose first row holds the headers below. Column order is the
storage contract; never reorder, only append.

  - transaction:  ID, Date, Description, Amount, Currency, CategoryId, Type, Tags
  - budget_goal:  ID, CategoryId, Target, Spent, Currency, Period, CreatedDate
  - savings_goal: ID, Name, Target, Current, Currency, Deadline, CreatedDate, Description
  - category:     ID, Name, Icon, Color, CreatedDate (custom categories only)
  - budget_entry: Date, Month, Total Income, Currency, Item Name, Item Amount,
                  Item Currency, Category, Remaining

Rows read back from the store are lists of strings; short rows are padded and
unparsable numbers become 0.
"""

from __future__ import annotations

import math
import string
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from budgetsheet.models.budget import BudgetGoal
from budgetsheet.models.category import Category
from budgetsheet.models.entry import BudgetEntryRow
from budgetsheet.models.savings import SavingsGoal
from budgetsheet.models.transaction import Transaction
from budgetsheet.services.metrics import period_window
from budgetsheet.services.money import Currency, Money

Row = List[Any]


class EntityKind(str, Enum):
    TRANSACTION = "transaction"
    BUDGET_GOAL = "budget_goal"
    SAVINGS_GOAL = "savings_goal"
    CATEGORY = "category"
    BUDGET_ENTRY = "budget_entry"


@dataclass(frozen=True)
class SheetLayout:
    title: str
    worksheet: str
    headers: Sequence[str]

    @property
    def width(self) -> int:
        return len(self.headers)

    def column_letter(self, header: str) -> str:
        return string.ascii_uppercase[list(self.headers).index(header)]


LAYOUTS: Dict[EntityKind, SheetLayout] = {
    EntityKind.TRANSACTION: SheetLayout(
        "Transactions",
        "Transactions",
        ("ID", "Date", "Description", "Amount", "Currency", "CategoryId", "Type", "Tags"),
    ),
    EntityKind.BUDGET_GOAL: SheetLayout(
        "Budget_Goals",
        "BudgetGoals",
        ("ID", "CategoryId", "Target", "Spent", "Currency", "Period", "CreatedDate"),
    ),
    EntityKind.SAVINGS_GOAL: SheetLayout(
        "Savings_Goals",
        "SavingsGoals",
        (
            "ID",
            "Name",
            "Target",
            "Current",
            "Currency",
            "Deadline",
            "CreatedDate",
            "Description",
        ),
    ),
    EntityKind.CATEGORY: SheetLayout(
        "Categories",
        "Categories",
        ("ID", "Name", "Icon", "Color", "CreatedDate"),
    ),
    EntityKind.BUDGET_ENTRY: SheetLayout(
        "Budget_Entries",
        "Budget Entries",
        (
            "Date",
            "Month",
            "Total Income",
            "Currency",
            "Item Name",
            "Item Amount",
            "Item Currency",
            "Category",
            "Remaining",
        ),
    ),
}


def spreadsheet_title(kind: EntityKind, prefix: str) -> str:
    return f"{prefix}_{LAYOUTS[kind].title}"


# ---------------------------------------------------------------------------
# Cell parsing helpers
def _pad(row: Sequence[Any], width: int) -> List[str]:
    cells = ["" if c is None else str(c) for c in row]
    return cells + [""] * (width - len(cells))


def _float(raw: str) -> float:
    try:
        value = float(str(raw).replace(",", ""))
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def _currency(raw: str) -> Currency:
    try:
        return Currency(raw.strip().upper())
    except ValueError:
        return Currency.USD


def _date(raw: str) -> Optional[date]:
    raw = raw.strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        return None


def _datetime(raw: str) -> Optional[datetime]:
    raw = raw.strip()
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


CategoryResolver = Callable[[str], Category]


# ---------------------------------------------------------------------------
# Transactions
def transaction_to_row(t: Transaction) -> Row:
    return [
        t.id,
        t.date.isoformat(),
        t.description,
        t.amount.amount,
        t.amount.currency.value,
        t.category.id,
        t.type,
        ",".join(t.tags),
    ]


def row_to_transaction(row: Sequence[Any], resolve: CategoryResolver) -> Transaction:
    c = _pad(row, LAYOUTS[EntityKind.TRANSACTION].width)
    return Transaction(
        id=c[0],
        date=_date(c[1]) or date.today(),
        description=c[2],
        amount=Money(amount=_float(c[3]), currency=_currency(c[4])),
        category=resolve(c[5] or "other"),
        type="income" if c[6].strip() == "income" else "expense",
        tags=[t for t in c[7].split(",") if t],
    )


# ---------------------------------------------------------------------------
# Budget goals
def budget_goal_to_row(goal: BudgetGoal, spent: float = 0.0) -> Row:
    return [
        goal.id,
        goal.category.id,
        goal.limit.amount,
        spent,
        goal.limit.currency.value,
        goal.period,
        goal.created_date.isoformat() if goal.created_date else now_iso(),
    ]


def budget_goal_name(category: Category, period: str) -> str:
    return f"{category.name} {period} budget"


def row_to_budget_goal(
    row: Sequence[Any],
    resolve: CategoryResolver,
    as_of: Optional[date] = None,
    alert_threshold: Optional[int] = None,
) -> BudgetGoal:
    c = _pad(row, LAYOUTS[EntityKind.BUDGET_GOAL].width)
    category = resolve(c[1] or "other")
    period = c[5].strip() if c[5].strip() in ("daily", "weekly", "monthly") else "monthly"
    start, end = period_window(period, as_of or date.today())
    return BudgetGoal(
        id=c[0],
        name=budget_goal_name(category, period),
        category=category,
        limit=Money(amount=_float(c[2]), currency=_currency(c[4])),
        period=period,
        start_date=start,
        end_date=end,
        alert_threshold=alert_threshold,
        created_date=_datetime(c[6]),
    )


# ---------------------------------------------------------------------------
# Savings goals
def savings_goal_to_row(goal: SavingsGoal) -> Row:
    current = goal.current_amount
    if current.currency != goal.target_amount.currency:
        raise ValueError("current and target amounts must share a currency")
    return [
        goal.id,
        goal.name,
        goal.target_amount.amount,
        current.amount,
        goal.target_amount.currency.value,
        goal.target_date.isoformat() if goal.target_date else "",
        goal.created_date.isoformat() if goal.created_date else now_iso(),
        goal.description or "",
    ]


def row_to_savings_goal(row: Sequence[Any]) -> SavingsGoal:
    c = _pad(row, LAYOUTS[EntityKind.SAVINGS_GOAL].width)
    currency = _currency(c[4])
    return SavingsGoal(
        id=c[0],
        name=c[1] or "Savings Goal",
        target_amount=Money(amount=_float(c[2]), currency=currency),
        current_amount=Money(amount=_float(c[3]), currency=currency),
        target_date=_date(c[5]),
        created_date=_datetime(c[6]),
        description=c[7] or None,
    )


# ---------------------------------------------------------------------------
# Custom categories
def category_to_row(cat: Category) -> Row:
    return [
        cat.id,
        cat.name,
        cat.icon or "",
        cat.color or "",
        cat.created_date.isoformat() if cat.created_date else now_iso(),
    ]


def row_to_category(row: Sequence[Any]) -> Category:
    c = _pad(row, LAYOUTS[EntityKind.CATEGORY].width)
    return Category(
        id=c[0],
        name=c[1],
        icon=c[2] or None,
        color=c[3] or None,
        created_date=_datetime(c[4]),
        is_custom=True,
    )


# ---------------------------------------------------------------------------
# Budget entries
def row_to_budget_entry(index: int, row: Sequence[Any]) -> BudgetEntryRow:
    c = _pad(row, LAYOUTS[EntityKind.BUDGET_ENTRY].width)
    return BudgetEntryRow(
        index=index,
        date=c[0],
        month=c[1],
        total_income=_float(c[2]),
        currency=c[3] or "USD",
        item_name=c[4],
        item_amount=_float(c[5]),
        item_currency=c[6] or "USD",
        category=c[7],
        remaining=_float(c[8]),
    )
