"""Entity-level data access on top of a spreadsheet gateway.

Responsibilities
----------------
- Map entities to rows (via ``db.schema``) and delegate row I/O to the gateway.
- Resolve entity ids to sheet row numbers; unknown ids raise ``NotFoundError``.
- Keep no state between calls besides the gateway it was built with.
"""

from __future__ import annotations

from datetime import date
from typing import Any, List, Optional, Sequence, Tuple

from budgetsheet.core.errors import NotFoundError
from budgetsheet.db.gateway import FIRST_DATA_ROW, Gateway
from budgetsheet.db.schema import (
    LAYOUTS,
    CategoryResolver,
    EntityKind,
    budget_goal_to_row,
    category_to_row,
    row_to_budget_entry,
    row_to_budget_goal,
    row_to_category,
    row_to_savings_goal,
    row_to_transaction,
    savings_goal_to_row,
    transaction_to_row,
)
from budgetsheet.models.budget import BudgetGoal
from budgetsheet.models.category import Category
from budgetsheet.models.entry import BudgetEntryRow
from budgetsheet.models.savings import SavingsGoal
from budgetsheet.models.transaction import Transaction

_LABELS = {
    EntityKind.TRANSACTION: "transaction",
    EntityKind.BUDGET_GOAL: "budget goal",
    EntityKind.SAVINGS_GOAL: "savings goal",
    EntityKind.CATEGORY: "category",
    EntityKind.BUDGET_ENTRY: "budget entry",
}


class Ledger:
    def __init__(self, gateway: Gateway):
        self.gateway = gateway

    # ------------------------------------------------------------------
    # Row helpers
    def _rows(self, kind: EntityKind) -> List[List[str]]:
        return [r for r in self.gateway.list(kind) if any(str(c).strip() for c in r)]

    def find_row(self, kind: EntityKind, entity_id: str) -> Tuple[int, List[str]]:
        """Return (sheet row number, row cells) for ``entity_id`` in column A."""
        for offset, row in enumerate(self.gateway.list(kind)):
            if row and row[0] == entity_id:
                return offset + FIRST_DATA_ROW, row
        raise NotFoundError(f"{_LABELS[kind]} '{entity_id}' not found")

    def _update(self, kind: EntityKind, entity_id: str, header: str, values: Sequence[Any]) -> None:
        row_number, _ = self.find_row(kind, entity_id)
        column = LAYOUTS[kind].column_letter(header)
        self.gateway.update_cells(kind, row_number, column, values)

    def _delete(self, kind: EntityKind, entity_id: str) -> None:
        row_number, _ = self.find_row(kind, entity_id)
        self.gateway.delete_row(kind, row_number)

    # ------------------------------------------------------------------
    # Custom categories
    def list_custom_categories(self) -> List[Category]:
        return [row_to_category(r) for r in self._rows(EntityKind.CATEGORY)]

    def insert_category(self, category: Category) -> None:
        self.gateway.append(EntityKind.CATEGORY, category_to_row(category))

    def update_category(self, category: Category) -> None:
        self._update(
            EntityKind.CATEGORY,
            category.id,
            "Name",
            [category.name, category.icon or "", category.color or ""],
        )

    def delete_category(self, category_id: str) -> None:
        self._delete(EntityKind.CATEGORY, category_id)

    # ------------------------------------------------------------------
    # Transactions
    def list_transactions(
        self,
        resolve: CategoryResolver,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Transaction]:
        items = [row_to_transaction(r, resolve) for r in self._rows(EntityKind.TRANSACTION)]
        if start_date:
            items = [t for t in items if t.date >= start_date]
        if end_date:
            items = [t for t in items if t.date <= end_date]
        return items

    def insert_transaction(self, transaction: Transaction) -> None:
        self.gateway.append(EntityKind.TRANSACTION, transaction_to_row(transaction))

    def delete_transaction(self, transaction_id: str) -> None:
        self._delete(EntityKind.TRANSACTION, transaction_id)

    # ------------------------------------------------------------------
    # Budget goals
    def list_budget_goals(
        self,
        resolve: CategoryResolver,
        as_of: Optional[date] = None,
        alert_threshold: Optional[int] = None,
    ) -> List[BudgetGoal]:
        return [
            row_to_budget_goal(r, resolve, as_of=as_of, alert_threshold=alert_threshold)
            for r in self._rows(EntityKind.BUDGET_GOAL)
        ]

    def get_budget_goal(
        self,
        goal_id: str,
        resolve: CategoryResolver,
        as_of: Optional[date] = None,
        alert_threshold: Optional[int] = None,
    ) -> BudgetGoal:
        _, row = self.find_row(EntityKind.BUDGET_GOAL, goal_id)
        return row_to_budget_goal(row, resolve, as_of=as_of, alert_threshold=alert_threshold)

    def insert_budget_goal(self, goal: BudgetGoal, spent: float = 0.0) -> None:
        self.gateway.append(EntityKind.BUDGET_GOAL, budget_goal_to_row(goal, spent))

    def update_budget_goal(self, goal: BudgetGoal, spent: float) -> None:
        """Rewrite Target, Spent, Currency and Period; Spent is a snapshot."""
        self._update(
            EntityKind.BUDGET_GOAL,
            goal.id,
            "Target",
            [goal.limit.amount, spent, goal.limit.currency.value, goal.period],
        )

    def delete_budget_goal(self, goal_id: str) -> None:
        self._delete(EntityKind.BUDGET_GOAL, goal_id)

    # ------------------------------------------------------------------
    # Savings goals
    def list_savings_goals(self) -> List[SavingsGoal]:
        return [row_to_savings_goal(r) for r in self._rows(EntityKind.SAVINGS_GOAL)]

    def get_savings_goal(self, goal_id: str) -> SavingsGoal:
        _, row = self.find_row(EntityKind.SAVINGS_GOAL, goal_id)
        return row_to_savings_goal(row)

    def insert_savings_goal(self, goal: SavingsGoal) -> None:
        self.gateway.append(EntityKind.SAVINGS_GOAL, savings_goal_to_row(goal))

    def update_savings_goal(self, goal: SavingsGoal) -> None:
        """Rewrite Name through Deadline (columns B:F)."""
        row = savings_goal_to_row(goal)
        self._update(EntityKind.SAVINGS_GOAL, goal.id, "Name", row[1:6])

    def set_savings_current(self, goal_id: str, amount: float) -> None:
        self._update(EntityKind.SAVINGS_GOAL, goal_id, "Current", [amount])

    def delete_savings_goal(self, goal_id: str) -> None:
        self._delete(EntityKind.SAVINGS_GOAL, goal_id)

    # ------------------------------------------------------------------
    # Budget entries (no id column; addressed by position)
    def list_budget_entries(self) -> List[BudgetEntryRow]:
        return [
            row_to_budget_entry(i, r)
            for i, r in enumerate(self.gateway.list(EntityKind.BUDGET_ENTRY))
        ]

    def append_budget_entries(self, rows: Sequence[Sequence[Any]]) -> None:
        for row in rows:
            self.gateway.append(EntityKind.BUDGET_ENTRY, row)

    def delete_budget_entry(self, index: int) -> None:
        count = len(self.gateway.list(EntityKind.BUDGET_ENTRY))
        if index < 0 or index >= count:
            raise NotFoundError(f"budget entry {index} not found")
        self.gateway.delete_row(EntityKind.BUDGET_ENTRY, index + FIRST_DATA_ROW)
