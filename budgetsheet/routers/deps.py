"""Shared FastAPI dependencies: settings, per-caller ledger and categories."""

from __future__ import annotations

from typing import Dict

from fastapi import Depends, Request

from budgetsheet.core.config import Settings, get_settings
from budgetsheet.core.security import get_current_identity
from budgetsheet.db.dal import Ledger
from budgetsheet.db.gateway import Gateway, MemoryGateway, SheetsGateway
from budgetsheet.models.identity import Identity
from budgetsheet.services.categories import CategoryRegistry


def get_settings_dep(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_gateway(
    request: Request,
    identity: Identity = Depends(get_current_identity),
    settings: Settings = Depends(get_settings_dep),
) -> Gateway:
    if settings.storage_backend == "memory":
        stores: Dict[str, MemoryGateway] = request.app.state.memory_stores
        if identity.email not in stores:
            stores[identity.email] = MemoryGateway(prefix=settings.spreadsheet_prefix)
        return stores[identity.email]
    return SheetsGateway(
        identity.access_token,
        prefix=settings.spreadsheet_prefix,
        timeout=settings.http_timeout_seconds,
    )


def get_ledger(gateway: Gateway = Depends(get_gateway)) -> Ledger:
    return Ledger(gateway)


def get_registry(ledger: Ledger = Depends(get_ledger)) -> CategoryRegistry:
    return CategoryRegistry(ledger)
