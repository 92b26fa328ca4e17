import logging
import uuid
from datetime import date, datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, Path, Response

from budgetsheet.core.config import Settings
from budgetsheet.db.dal import Ledger
from budgetsheet.models.savings import (
    ContributionIn,
    SavingsGoal,
    SavingsGoalIn,
    SavingsGoalOut,
    SavingsGoalUpdateIn,
    SavingsProgressOut,
    TimeToTargetOut,
)
from budgetsheet.routers.deps import get_ledger, get_settings_dep
from budgetsheet.services.metrics import TimeToTarget, savings_progress, time_to_target
from budgetsheet.services.money import add, convert, zero

router = APIRouter(prefix="/savings-goals", tags=["savings-goals"])
logger = logging.getLogger("budgetsheet.savings_goals")


def _with_progress(goal: SavingsGoal, settings: Settings) -> SavingsGoalOut:
    rate = settings.usd_to_khr_rate
    progress = savings_progress(goal, rate=rate)
    projection = time_to_target(goal, as_of=date.today(), rate=rate)
    if isinstance(projection, TimeToTarget):
        projection = TimeToTargetOut.model_validate(projection, from_attributes=True)
    return SavingsGoalOut(
        **goal.model_dump(),
        progress=SavingsProgressOut.model_validate(progress, from_attributes=True),
        time_to_target=projection,
    )


@router.get(
    "",
    response_model=List[SavingsGoalOut],
    summary="Savings goals with progress and time-to-target",
)
def list_savings_goals(
    ledger: Ledger = Depends(get_ledger),
    settings: Settings = Depends(get_settings_dep),
):
    return [_with_progress(g, settings) for g in ledger.list_savings_goals()]


@router.post(
    "", response_model=SavingsGoalOut, status_code=201, summary="Create a savings goal"
)
def create_savings_goal(
    payload: SavingsGoalIn,
    ledger: Ledger = Depends(get_ledger),
    settings: Settings = Depends(get_settings_dep),
):
    goal = SavingsGoal(
        id=uuid.uuid4().hex,
        name=payload.name.strip(),
        target_amount=payload.target_amount,
        current_amount=zero(payload.target_amount.currency),
        target_date=payload.target_date,
        description=payload.description or None,
        created_date=datetime.now(timezone.utc).replace(microsecond=0),
    )
    ledger.insert_savings_goal(goal)
    logger.info("savings goal %s created", goal.id)
    return _with_progress(goal, settings)


@router.put(
    "/{goal_id}", response_model=SavingsGoalOut, summary="Edit a goal or set its progress"
)
def update_savings_goal(
    payload: SavingsGoalUpdateIn,
    goal_id: str = Path(..., min_length=1),
    ledger: Ledger = Depends(get_ledger),
    settings: Settings = Depends(get_settings_dep),
):
    goal = ledger.get_savings_goal(goal_id)
    rate = settings.usd_to_khr_rate
    target = payload.target_amount or goal.target_amount
    # stored progress always shares the target's currency
    current = convert(payload.current_amount or goal.current_amount, target.currency, rate)
    changes = {"target_amount": target, "current_amount": current}
    if payload.name is not None:
        changes["name"] = payload.name.strip()
    if "target_date" in payload.model_fields_set:
        changes["target_date"] = payload.target_date
    updated = goal.model_copy(update=changes)
    ledger.update_savings_goal(updated)
    return _with_progress(updated, settings)


@router.post(
    "/{goal_id}/contributions",
    response_model=SavingsGoalOut,
    summary="Add a contribution to a savings goal",
)
def add_contribution(
    payload: ContributionIn,
    goal_id: str = Path(..., min_length=1),
    ledger: Ledger = Depends(get_ledger),
    settings: Settings = Depends(get_settings_dep),
):
    goal = ledger.get_savings_goal(goal_id)
    current = add(
        goal.current_amount,
        payload.amount,
        target=goal.target_amount.currency,
        rate=settings.usd_to_khr_rate,
    )
    ledger.set_savings_current(goal_id, current.amount)
    return _with_progress(goal.model_copy(update={"current_amount": current}), settings)


@router.delete("/{goal_id}", status_code=204, summary="Delete a savings goal")
def delete_savings_goal(
    goal_id: str = Path(..., min_length=1),
    ledger: Ledger = Depends(get_ledger),
):
    ledger.delete_savings_goal(goal_id)
    return Response(status_code=204)
