from datetime import date, datetime, timezone

from budgetsheet.db.schema import (
    LAYOUTS,
    EntityKind,
    budget_goal_to_row,
    category_to_row,
    row_to_budget_entry,
    row_to_budget_goal,
    row_to_category,
    row_to_savings_goal,
    row_to_transaction,
    savings_goal_to_row,
    spreadsheet_title,
    transaction_to_row,
)
from budgetsheet.models.budget import BudgetGoal
from budgetsheet.models.category import Category
from budgetsheet.models.savings import SavingsGoal
from budgetsheet.models.transaction import Transaction
from budgetsheet.services.categories import builtin_categories, fallback_category
from budgetsheet.services.money import Currency, Money

CATS = {c.id: c for c in builtin_categories()}


def resolve(category_id):
    return CATS.get(category_id, fallback_category())


def test_spreadsheet_titles():
    assert spreadsheet_title(EntityKind.TRANSACTION, "MMMS") == "MMMS_Transactions"
    assert spreadsheet_title(EntityKind.BUDGET_ENTRY, "X") == "X_Budget_Entries"


def test_column_letters():
    layout = LAYOUTS[EntityKind.BUDGET_GOAL]
    assert layout.column_letter("ID") == "A"
    assert layout.column_letter("Target") == "C"
    assert LAYOUTS[EntityKind.SAVINGS_GOAL].column_letter("Current") == "D"


def test_transaction_row_mapping():
    t = Transaction(
        id="t1",
        date=date(2024, 5, 2),
        description="Lunch",
        amount=Money(amount=12.5, currency=Currency.USD),
        category=CATS["food"],
        type="expense",
        tags=["work", "team"],
    )
    row = transaction_to_row(t)
    assert row == ["t1", "2024-05-02", "Lunch", 12.5, "USD", "food", "expense", "work,team"]
    back = row_to_transaction([str(c) for c in row], resolve)
    assert back.model_dump() == t.model_dump()


def test_short_transaction_row_is_padded():
    t = row_to_transaction(["t2", "2024-01-01", "", "abc"], resolve)
    assert t.amount == Money(amount=0.0, currency=Currency.USD)
    assert t.category.id == "other"
    assert t.type == "expense"
    assert t.tags == []


def test_unknown_category_resolves_to_other():
    t = row_to_transaction(["t3", "2024-01-01", "", "5", "KHR", "custom_gone", "income"], resolve)
    assert t.category.id == "other"
    assert t.amount.currency == Currency.KHR
    assert t.type == "income"


def test_budget_goal_row_derives_window_and_name():
    row = ["g1", "food", "100", "40", "USD", "weekly", "2024-05-01T00:00:00+00:00"]
    goal = row_to_budget_goal(row, resolve, as_of=date(2024, 5, 15), alert_threshold=75)
    assert goal.period == "weekly"
    assert (goal.start_date, goal.end_date) == (date(2024, 5, 12), date(2024, 5, 18))
    assert goal.name == "Food & Dining weekly budget"
    assert goal.alert_threshold == 75
    assert goal.limit == Money(amount=100, currency=Currency.USD)


def test_budget_goal_unknown_period_defaults_to_monthly():
    goal = row_to_budget_goal(["g2", "food", "5", "", "", "yearly"], resolve, as_of=date(2024, 2, 3))
    assert goal.period == "monthly"
    assert goal.end_date == date(2024, 2, 29)


def test_budget_goal_to_row_writes_spent_snapshot():
    goal = BudgetGoal(
        id="g1",
        name="n",
        category=CATS["transport"],
        limit=Money(amount=50, currency=Currency.KHR),
        period="daily",
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 1),
        created_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    row = budget_goal_to_row(goal, spent=12.0)
    assert row[:6] == ["g1", "transport", 50, 12.0, "KHR", "daily"]


def test_savings_goal_row_mapping():
    goal = SavingsGoal(
        id="s1",
        name="Bike",
        target_amount=Money(amount=500, currency=Currency.USD),
        current_amount=Money(amount=120, currency=Currency.USD),
        target_date=date(2024, 12, 31),
        description="commute",
        created_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    row = savings_goal_to_row(goal)
    assert row[:6] == ["s1", "Bike", 500, 120, "USD", "2024-12-31"]
    back = row_to_savings_goal([str(c) for c in row])
    assert back.model_dump() == goal.model_dump()


def test_savings_goal_without_deadline():
    goal = row_to_savings_goal(["s2", "", "100", "", "KHR", "", "", ""])
    assert goal.name == "Savings Goal"
    assert goal.target_date is None
    assert goal.current_amount == Money(amount=0, currency=Currency.KHR)


def test_category_row_mapping():
    cat = Category(
        id="custom_abc",
        name="Pets",
        icon="🐶",
        color="#112233",
        is_custom=True,
        created_date=datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc),
    )
    back = row_to_category(category_to_row(cat))
    assert back == cat


def test_budget_entry_row():
    entry = row_to_budget_entry(
        3, ["2024-05-01", "2024-05", "1000", "USD", "Rent", "400", "USD", "bills", "600"]
    )
    assert entry.index == 3
    assert entry.item_name == "Rent"
    assert entry.item_amount == 400
    assert entry.remaining == 600


def test_non_finite_cells_read_as_zero():
    goal = row_to_savings_goal(["s3", "x", "nan", "inf", "USD"])
    assert goal.target_amount.amount == 0
    assert goal.current_amount.amount == 0


def test_models_package_exports_resolve():
    from budgetsheet import models

    missing = [name for name in models.__all__ if not hasattr(models, name)]
    assert missing == []
