"""Alert aggregation service.

Consolidates budget threshold alerts and savings completion notices into a
single list with a consistent shape so the UI can render them uniformly.

Alert schema (dict):
  type: 'budget_exceeded' | 'budget_warning' | 'goal_completed'
  goal_id: str
  priority: 'high' | 'medium' | 'low'
  percentage: float
  message: human readable string

Thresholds come from the goal (``alert_threshold``) or the configured default.
Delivery (push, chat bots) is out of scope; this module only computes.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Tuple

from budgetsheet.models.budget import BudgetGoal
from budgetsheet.models.savings import SavingsGoal
from budgetsheet.services.metrics import BudgetProgress, SavingsProgress
from budgetsheet.services.money import format_money

_PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


def collect_alerts(
    budgets: Iterable[Tuple[BudgetGoal, BudgetProgress]],
    savings: Iterable[Tuple[SavingsGoal, SavingsProgress]] = (),
    default_threshold: int = 80,
    locale: str = "en-US",
) -> List[Dict[str, Any]]:
    alerts: List[Dict[str, Any]] = []

    for goal, progress in budgets:
        threshold = goal.alert_threshold or default_threshold
        pct = round(progress.percentage, 1)
        if progress.status == "exceeded":
            alerts.append(
                _alert(
                    "budget_exceeded",
                    goal.id,
                    "high",
                    pct,
                    f"{goal.name} exceeded: {format_money(progress.spent, locale)} of "
                    f"{format_money(goal.limit, locale)} ({pct}%)",
                )
            )
        elif progress.percentage >= threshold:
            alerts.append(
                _alert(
                    "budget_warning",
                    goal.id,
                    "medium",
                    pct,
                    f"{goal.name} at {pct}% (>={threshold}%)",
                )
            )

    for goal, progress in savings:
        if progress.is_completed:
            alerts.append(
                _alert(
                    "goal_completed",
                    goal.id,
                    "low",
                    round(progress.percentage, 1),
                    f"{goal.name} reached its target of "
                    f"{format_money(goal.target_amount, locale)}",
                )
            )

    alerts.sort(key=lambda a: _PRIORITY_ORDER[a["priority"]])
    return alerts


def _alert(
    kind: str, goal_id: str, priority: str, percentage: float, message: str
) -> Dict[str, Any]:
    return {
        "type": kind,
        "goal_id": goal_id,
        "priority": priority,
        "percentage": percentage,
        "message": message,
    }


__all__ = ["collect_alerts"]
