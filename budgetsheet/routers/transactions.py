import logging
import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response

from budgetsheet.core.config import Settings
from budgetsheet.core.errors import ValidationError
from budgetsheet.db.dal import Ledger
from budgetsheet.models.entry import valid_month
from budgetsheet.models.report import CategoryBreakdownOut, MonthlySummaryOut
from budgetsheet.models.transaction import Transaction, TransactionIn, TransactionType
from budgetsheet.routers.deps import get_ledger, get_registry, get_settings_dep
from budgetsheet.services.categories import CategoryRegistry
from budgetsheet.services.metrics import (
    category_breakdown,
    month_window,
    monthly_summary,
    period_window,
)
from budgetsheet.services.money import Currency

router = APIRouter(prefix="/transactions", tags=["transactions"])
logger = logging.getLogger("budgetsheet.transactions")


# Helpers ----------------------------------------------------------
def _month(month: str) -> str:
    try:
        return valid_month(month)
    except ValueError as e:
        raise ValidationError(str(e)) from e


def _resolve_window(
    month: Optional[str], start_date: Optional[date], end_date: Optional[date]
):
    if month:
        return month_window(_month(month))
    if start_date and end_date and start_date > end_date:
        raise ValidationError("start_date cannot be after end_date")
    return start_date, end_date


def _breakdown_out(items, registry: CategoryRegistry) -> List[CategoryBreakdownOut]:
    out = []
    for item in items:
        row = CategoryBreakdownOut.model_validate(item, from_attributes=True)
        row.category_name = registry.get_by_id(item.category_id).name
        out.append(row)
    return out


# Routes -----------------------------------------------------------
@router.get(
    "", response_model=List[Transaction], summary="List transactions with optional filters"
)
def list_transactions(
    month: Optional[str] = Query(None, description="Calendar month YYYY-MM"),
    start_date: Optional[date] = Query(None, description="Filter: start date inclusive"),
    end_date: Optional[date] = Query(None, description="Filter: end date inclusive"),
    type: Optional[TransactionType] = Query(None, description="income | expense"),
    category_id: Optional[str] = Query(None, description="Filter by category id"),
    ledger: Ledger = Depends(get_ledger),
    registry: CategoryRegistry = Depends(get_registry),
):
    start, end = _resolve_window(month, start_date, end_date)
    items = ledger.list_transactions(registry.get_by_id, start_date=start, end_date=end)
    if type:
        items = [t for t in items if t.type == type]
    if category_id:
        items = [t for t in items if t.category.id == category_id]
    # newest first
    return sorted(items, key=lambda t: t.date, reverse=True)


@router.post("", response_model=Transaction, status_code=201, summary="Record a transaction")
def create_transaction(
    payload: TransactionIn,
    ledger: Ledger = Depends(get_ledger),
    registry: CategoryRegistry = Depends(get_registry),
):
    if not registry.exists(payload.category_id):
        raise ValidationError(f"unknown category '{payload.category_id}'")
    transaction = Transaction(
        id=uuid.uuid4().hex,
        date=payload.date,
        description=payload.description,
        amount=payload.amount,
        category=registry.get_by_id(payload.category_id),
        type=payload.type,
        recurring=payload.recurring,
        tags=payload.tags,
    )
    ledger.insert_transaction(transaction)
    logger.info("transaction %s recorded", transaction.id)
    return transaction


@router.delete("/{transaction_id}", status_code=204, summary="Delete a transaction")
def delete_transaction(
    transaction_id: str = Path(..., min_length=1),
    ledger: Ledger = Depends(get_ledger),
):
    ledger.delete_transaction(transaction_id)
    return Response(status_code=204)


@router.get(
    "/breakdown",
    response_model=List[CategoryBreakdownOut],
    summary="Spending per category with trend vs the previous window",
)
def breakdown(
    start_date: Optional[date] = Query(None, description="Defaults to start of this month"),
    end_date: Optional[date] = Query(None, description="Defaults to end of this month"),
    currency: Currency = Query(Currency.USD, description="Reporting currency"),
    ledger: Ledger = Depends(get_ledger),
    registry: CategoryRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings_dep),
):
    default_start, default_end = period_window("monthly", date.today())
    start = start_date or default_start
    end = end_date or default_end
    if start > end:
        raise ValidationError("start_date cannot be after end_date")
    transactions = ledger.list_transactions(registry.get_by_id)
    items = category_breakdown(transactions, start, end, currency, settings.usd_to_khr_rate)
    return _breakdown_out(items, registry)


@router.get(
    "/summary", response_model=MonthlySummaryOut, summary="Monthly income vs expenses"
)
def summary(
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to current month"),
    currency: Currency = Query(Currency.USD, description="Reporting currency"),
    ledger: Ledger = Depends(get_ledger),
    registry: CategoryRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings_dep),
):
    month = _month(month) if month else date.today().strftime("%Y-%m")
    transactions = ledger.list_transactions(registry.get_by_id)
    result = monthly_summary(transactions, month, currency, settings.usd_to_khr_rate)
    out = MonthlySummaryOut.model_validate(result, from_attributes=True)
    out.breakdown = _breakdown_out(result.breakdown, registry)
    return out
