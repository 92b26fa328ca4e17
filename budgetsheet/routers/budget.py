from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response

from budgetsheet.core.config import Settings
from budgetsheet.core.errors import ValidationError
from budgetsheet.db.dal import Ledger
from budgetsheet.models.entry import (
    BudgetEntryIn,
    BudgetEntryResult,
    BudgetEntryRow,
    valid_month,
)
from budgetsheet.routers.deps import get_ledger, get_settings_dep
from budgetsheet.services.money import Money, round2, total

router = APIRouter(prefix="/budget", tags=["budget"])


@router.post(
    "/entry",
    response_model=BudgetEntryResult,
    status_code=201,
    summary="Log a month's income and spending items",
)
def create_entry(
    payload: BudgetEntryIn,
    ledger: Ledger = Depends(get_ledger),
    settings: Settings = Depends(get_settings_dep),
):
    # 1. Normalize every item into the entry currency
    spending = total(
        (item.amount for item in payload.items), payload.currency, settings.usd_to_khr_rate
    )
    spending = Money(amount=round2(spending.amount), currency=payload.currency)
    remaining = Money(
        amount=round2(payload.total_income - spending.amount), currency=payload.currency
    )

    # 2. One row per item; income and remaining repeat on each
    rows = [
        [
            payload.date.isoformat(),
            payload.month,
            payload.total_income,
            payload.currency.value,
            item.name,
            item.amount.amount,
            item.amount.currency.value,
            item.category or "",
            remaining.amount,
        ]
        for item in payload.items
    ]
    ledger.append_budget_entries(rows)
    return BudgetEntryResult(
        total_spending=spending, remaining=remaining, entries_added=len(rows)
    )


@router.get("/entries", response_model=List[BudgetEntryRow], summary="Logged budget rows")
def list_entries(
    month: Optional[str] = Query(None, description="Filter by month YYYY-MM"),
    ledger: Ledger = Depends(get_ledger),
):
    entries = ledger.list_budget_entries()
    if month:
        try:
            valid_month(month)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        entries = [e for e in entries if e.month == month]
    return entries


@router.delete("/entry/{index}", status_code=204, summary="Delete a budget row by index")
def delete_entry(
    index: int = Path(..., ge=0, description="0-based position from GET /entries"),
    ledger: Ledger = Depends(get_ledger),
):
    ledger.delete_budget_entry(index)
    return Response(status_code=204)
