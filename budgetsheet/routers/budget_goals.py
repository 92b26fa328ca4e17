import logging
import uuid
from datetime import date, datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, Path, Response

from budgetsheet.core.config import Settings
from budgetsheet.core.errors import ValidationError
from budgetsheet.db.dal import Ledger
from budgetsheet.db.schema import budget_goal_name
from budgetsheet.models.budget import (
    BudgetGoal,
    BudgetGoalIn,
    BudgetGoalOut,
    BudgetGoalUpdateIn,
    BudgetProgressOut,
)
from budgetsheet.models.report import AlertOut
from budgetsheet.routers.deps import get_ledger, get_registry, get_settings_dep
from budgetsheet.services.alerts import collect_alerts
from budgetsheet.services.categories import CategoryRegistry
from budgetsheet.services.metrics import budget_progress, period_window, savings_progress

router = APIRouter(prefix="/budget-goals", tags=["budget-goals"])
logger = logging.getLogger("budgetsheet.budget_goals")


def _with_progress(goal: BudgetGoal, transactions, settings: Settings) -> BudgetGoalOut:
    progress = budget_progress(goal, transactions, settings.usd_to_khr_rate)
    return BudgetGoalOut(
        **goal.model_dump(),
        progress=BudgetProgressOut.model_validate(progress, from_attributes=True),
    )


def _load_goal(
    goal_id: str, ledger: Ledger, registry: CategoryRegistry, settings: Settings
) -> BudgetGoal:
    return ledger.get_budget_goal(
        goal_id,
        registry.get_by_id,
        as_of=date.today(),
        alert_threshold=settings.budget_alert_threshold,
    )


@router.get("", response_model=List[BudgetGoalOut], summary="Budget goals with progress")
def list_budget_goals(
    ledger: Ledger = Depends(get_ledger),
    registry: CategoryRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings_dep),
):
    goals = ledger.list_budget_goals(
        registry.get_by_id,
        as_of=date.today(),
        alert_threshold=settings.budget_alert_threshold,
    )
    if not goals:
        return []
    transactions = ledger.list_transactions(registry.get_by_id)
    return [_with_progress(g, transactions, settings) for g in goals]


@router.post(
    "", response_model=BudgetGoalOut, status_code=201, summary="Create a budget goal"
)
def create_budget_goal(
    payload: BudgetGoalIn,
    ledger: Ledger = Depends(get_ledger),
    registry: CategoryRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings_dep),
):
    if not registry.exists(payload.category_id):
        raise ValidationError(f"unknown category '{payload.category_id}'")
    category = registry.get_by_id(payload.category_id)
    start, end = period_window(payload.period, date.today())
    goal = BudgetGoal(
        id=uuid.uuid4().hex,
        name=budget_goal_name(category, payload.period),
        category=category,
        limit=payload.limit,
        period=payload.period,
        start_date=start,
        end_date=end,
        alert_threshold=settings.budget_alert_threshold,
        created_date=datetime.now(timezone.utc).replace(microsecond=0),
    )
    out = _with_progress(goal, ledger.list_transactions(registry.get_by_id), settings)
    ledger.insert_budget_goal(goal, spent=out.progress.spent.amount)
    logger.info("budget goal %s created for %s", goal.id, category.id)
    return out


@router.get("/alerts", response_model=List[AlertOut], summary="Budget and savings alerts")
def list_alerts(
    ledger: Ledger = Depends(get_ledger),
    registry: CategoryRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings_dep),
):
    rate = settings.usd_to_khr_rate
    goals = ledger.list_budget_goals(
        registry.get_by_id,
        as_of=date.today(),
        alert_threshold=settings.budget_alert_threshold,
    )
    transactions = ledger.list_transactions(registry.get_by_id) if goals else []
    budgets = [(g, budget_progress(g, transactions, rate)) for g in goals]
    savings = [(g, savings_progress(g, rate=rate)) for g in ledger.list_savings_goals()]
    return collect_alerts(
        budgets,
        savings,
        default_threshold=settings.budget_alert_threshold,
        locale=settings.default_locale,
    )


@router.put("/{goal_id}", response_model=BudgetGoalOut, summary="Change limit or period")
def update_budget_goal(
    payload: BudgetGoalUpdateIn,
    goal_id: str = Path(..., min_length=1),
    ledger: Ledger = Depends(get_ledger),
    registry: CategoryRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings_dep),
):
    goal = _load_goal(goal_id, ledger, registry, settings)
    period = payload.period or goal.period
    start, end = period_window(period, date.today())
    updated = goal.model_copy(
        update={
            "limit": payload.limit or goal.limit,
            "period": period,
            "name": budget_goal_name(goal.category, period),
            "start_date": start,
            "end_date": end,
        }
    )
    out = _with_progress(updated, ledger.list_transactions(registry.get_by_id), settings)
    ledger.update_budget_goal(updated, spent=out.progress.spent.amount)
    return out


@router.delete("/{goal_id}", status_code=204, summary="Delete a budget goal")
def delete_budget_goal(
    goal_id: str = Path(..., min_length=1),
    ledger: Ledger = Depends(get_ledger),
):
    ledger.delete_budget_goal(goal_id)
    return Response(status_code=204)


@router.get(
    "/{goal_id}/progress",
    response_model=BudgetProgressOut,
    summary="Progress of one budget goal in its current window",
)
def get_budget_progress(
    goal_id: str = Path(..., min_length=1),
    ledger: Ledger = Depends(get_ledger),
    registry: CategoryRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings_dep),
):
    goal = _load_goal(goal_id, ledger, registry, settings)
    return _with_progress(goal, ledger.list_transactions(registry.get_by_id), settings).progress
