from datetime import date, timedelta

import pytest

from budgetsheet.models.budget import BudgetGoal
from budgetsheet.models.category import Category
from budgetsheet.models.savings import SavingsGoal
from budgetsheet.models.transaction import Transaction
from budgetsheet.services.categories import builtin_categories
from budgetsheet.services.metrics import (
    TimeToTarget,
    budget_progress,
    budget_status,
    category_breakdown,
    change_percentage,
    monthly_summary,
    period_window,
    previous_window,
    savings_progress,
    time_to_target,
)
from budgetsheet.services.money import Currency, Money

CATS = {c.id: c for c in builtin_categories()}
AS_OF = date(2024, 5, 15)  # a Wednesday


def usd(amount):
    return Money(amount=amount, currency=Currency.USD)


def tx(amount, category="food", d=AS_OF, kind="expense", money=None):
    return Transaction(
        id=f"t-{amount}-{category}-{d}",
        date=d,
        amount=money or usd(amount),
        category=CATS[category],
        type=kind,
    )


def goal(limit, category="food", period="monthly", as_of=AS_OF, currency=Currency.USD):
    start, end = period_window(period, as_of)
    return BudgetGoal(
        id="g1",
        name="Food monthly budget",
        category=CATS[category],
        limit=Money(amount=limit, currency=currency),
        period=period,
        start_date=start,
        end_date=end,
    )


def savings(target, current, target_date=None):
    return SavingsGoal(
        id="s1",
        name="Laptop",
        target_amount=usd(target),
        current_amount=usd(current),
        target_date=target_date,
    )


# ---------------- windows -----------------
def test_period_windows():
    assert period_window("daily", AS_OF) == (AS_OF, AS_OF)
    assert period_window("weekly", AS_OF) == (date(2024, 5, 12), date(2024, 5, 18))
    assert period_window("monthly", AS_OF) == (date(2024, 5, 1), date(2024, 5, 31))
    assert period_window("monthly", date(2024, 2, 10))[1] == date(2024, 2, 29)


def test_weekly_window_starts_on_sunday():
    sunday = date(2024, 5, 12)
    assert period_window("weekly", sunday)[0] == sunday
    assert period_window("weekly", date(2024, 5, 18))[0] == sunday


def test_unknown_period_raises():
    with pytest.raises(ValueError):
        period_window("yearly", AS_OF)


def test_previous_window_same_length():
    assert previous_window(date(2024, 5, 11), date(2024, 5, 20)) == (
        date(2024, 5, 1),
        date(2024, 5, 10),
    )


# ---------------- budget progress -----------------
def test_budget_progress_food_example():
    transactions = [tx(50), tx(30), tx(999, category="transport")]
    progress = budget_progress(goal(100), transactions)
    assert progress.spent == usd(80)
    assert progress.percentage == pytest.approx(80.0)
    assert progress.remaining == usd(20)
    assert progress.status == "active"


def test_budget_exactly_at_limit_is_achieved():
    progress = budget_progress(goal(100), [tx(100)])
    assert progress.status == "achieved"
    assert progress.percentage == 100


def test_budget_over_limit_is_exceeded():
    progress = budget_progress(goal(100), [tx(100.01)])
    assert progress.status == "exceeded"
    assert progress.display_percentage == 100
    assert progress.remaining.amount == 0


def test_budget_status_boundaries():
    assert budget_status(99.99, 100) == "active"
    assert budget_status(100, 100) == "achieved"
    assert budget_status(100.01, 100) == "exceeded"


@pytest.mark.parametrize(
    "amounts",
    [
        [0.01, 65.4, 34.59],
        [0.1] * 10 + [99.0],
        [33.33, 33.33, 33.34],
        [19.99, 0.01, 80.0],
    ],
)
def test_cent_items_summing_to_limit_are_achieved(amounts):
    progress = budget_progress(goal(100), [tx(a) for a in amounts])
    assert progress.status == "achieved"
    assert progress.spent == usd(100)
    assert progress.percentage == 100
    assert progress.remaining.amount == 0


def test_one_cent_past_summed_limit_is_exceeded():
    amounts = [0.01, 65.4, 34.59, 0.01]
    progress = budget_progress(goal(100), [tx(a) for a in amounts])
    assert progress.status == "exceeded"
    assert progress.spent == usd(100.01)


def test_one_cent_short_of_limit_is_active():
    amounts = [0.1, 0.2, 99.69]
    progress = budget_progress(goal(100), [tx(a) for a in amounts])
    assert progress.status == "active"
    assert progress.remaining == usd(0.01)


def test_khr_spend_summing_to_khr_limit_is_achieved():
    items = [
        tx(0, money=Money(amount=a, currency=Currency.KHR)) for a in (100.4, 200.3, 99.3)
    ]
    progress = budget_progress(goal(400, currency=Currency.KHR), items)
    assert progress.spent == Money(amount=400, currency=Currency.KHR)
    assert progress.status == "achieved"


def test_budget_ignores_income_and_out_of_window():
    transactions = [
        tx(40, kind="income"),
        tx(25, d=AS_OF - timedelta(days=30)),
        tx(10),
    ]
    assert budget_progress(goal(100), transactions).spent == usd(10)


def test_budget_converts_spend_into_limit_currency():
    khr_spend = tx(0, money=Money(amount=41000, currency=Currency.KHR))
    progress = budget_progress(goal(20), [khr_spend], rate=4100)
    assert progress.spent.amount == pytest.approx(10.0)
    assert progress.percentage == pytest.approx(50.0)


# ---------------- savings -----------------
def test_savings_completed_at_target():
    progress = savings_progress(savings(1000, 1000))
    assert progress.is_completed
    assert progress.remaining.amount == 0
    assert progress.percentage == 100


def test_savings_percentage_is_capped():
    progress = savings_progress(savings(1000, 1500))
    assert progress.percentage == 100
    assert progress.is_completed


def test_savings_includes_contributions():
    progress = savings_progress(savings(1000, 200), [usd(300)])
    assert progress.saved == usd(500)
    assert progress.percentage == pytest.approx(50.0)
    assert not progress.is_completed


@pytest.mark.parametrize(
    "current, contributions",
    [
        (0.1, [0.2]),
        (0.0, [0.1] * 3),
        (0.01, [0.09, 0.2]),
    ],
)
def test_cent_contributions_reaching_target_complete_goal(current, contributions):
    progress = savings_progress(savings(0.3, current), [usd(c) for c in contributions])
    assert progress.is_completed
    assert progress.saved == usd(0.3)
    assert progress.percentage == 100
    assert progress.remaining.amount == 0


def test_savings_one_cent_short_is_not_completed():
    progress = savings_progress(savings(100, 65.4), [usd(0.01), usd(34.58)])
    assert not progress.is_completed
    assert progress.remaining == usd(0.01)


# ---------------- time to target -----------------
def test_time_to_target_without_date():
    assert time_to_target(savings(1000, 0), as_of=AS_OF) is None


def test_time_to_target_yesterday_is_overdue():
    g = savings(1000, 100, target_date=AS_OF - timedelta(days=1))
    assert time_to_target(g, as_of=AS_OF) == "overdue"


def test_time_to_target_today_is_zero_days():
    g = savings(1000, 400, target_date=AS_OF)
    result = time_to_target(g, as_of=AS_OF)
    assert isinstance(result, TimeToTarget)
    assert result.days_remaining == 0
    assert result.daily_required == usd(600)


def test_time_to_target_daily_required():
    g = savings(1000, 400, target_date=AS_OF + timedelta(days=30))
    result = time_to_target(g, as_of=AS_OF)
    assert result.days_remaining == 30
    assert result.daily_required.amount == pytest.approx(20.0)


def test_completed_goal_past_date_is_not_overdue():
    g = savings(1000, 1000, target_date=AS_OF - timedelta(days=3))
    result = time_to_target(g, as_of=AS_OF)
    assert result.days_remaining == 0
    assert result.daily_required.amount == 0


# ---------------- breakdown / summary -----------------
def test_change_percentage():
    assert change_percentage(150, 100) == pytest.approx(50.0)
    assert change_percentage(50, 0) == 100.0
    assert change_percentage(0, 0) == 0.0


def test_category_breakdown_with_trend():
    start, end = date(2024, 5, 11), date(2024, 5, 20)
    transactions = [
        tx(60, d=date(2024, 5, 12)),
        tx(40, d=date(2024, 5, 13)),
        tx(50, category="transport", d=date(2024, 5, 14)),
        tx(80, d=date(2024, 5, 5)),  # previous window
        tx(70, category="transport", d=date(2024, 5, 5)),
        tx(500, kind="income", category="income", d=date(2024, 5, 12)),
    ]
    items = category_breakdown(transactions, start, end)
    assert [i.category_id for i in items] == ["food", "transport"]
    food, transport = items
    assert food.total_spent == usd(100)
    assert food.transaction_count == 2
    assert food.average_transaction == usd(50)
    assert food.percentage == pytest.approx(100 / 150 * 100)
    assert food.trend == "up"
    assert transport.trend == "down"


def test_category_breakdown_rejects_inverted_window():
    with pytest.raises(ValueError):
        category_breakdown([], date(2024, 5, 2), date(2024, 5, 1))


def test_monthly_summary():
    transactions = [
        tx(1000, kind="income", category="income", d=date(2024, 5, 1)),
        tx(200, d=date(2024, 5, 3)),
        tx(100, d=date(2024, 4, 3)),
        tx(800, kind="income", category="income", d=date(2024, 4, 1)),
    ]
    summary = monthly_summary(transactions, "2024-05")
    assert summary.total_income == usd(1000)
    assert summary.total_expenses == usd(200)
    assert summary.remaining == usd(800)
    assert summary.income_change == pytest.approx(25.0)
    assert summary.expense_change == pytest.approx(100.0)
    assert len(summary.breakdown) == 1


def test_custom_category_is_tracked_by_id():
    pets = Category(id="custom_pets", name="Pets", is_custom=True)
    t = Transaction(id="x", date=AS_OF, amount=usd(5), category=pets, type="expense")
    items = category_breakdown([t], AS_OF, AS_OF)
    assert items[0].category_id == "custom_pets"
