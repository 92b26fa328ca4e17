from typing import Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from budgetsheet.core.config import Settings
from budgetsheet.routers.deps import get_settings_dep
from budgetsheet.services.money import (
    CURRENCY_INFO,
    Currency,
    Money,
    convert,
    format_money,
    parse_currency,
    round2,
)

router = APIRouter(prefix="/currency", tags=["currency"])

RATE_SOURCE = "static configuration (not a live exchange-rate feed)"


class ConvertIn(BaseModel):
    amount: float = Field(..., allow_inf_nan=False)
    from_currency: str = Field(..., examples=["USD"])
    to_currency: str = Field(..., examples=["KHR"])


class ConvertOut(BaseModel):
    original: Money
    converted: Money
    rate: float


class FormatIn(BaseModel):
    amount: float = Field(..., allow_inf_nan=False)
    currency: str
    locale: Optional[str] = None


class CurrencyInfoOut(BaseModel):
    code: Currency
    name: str
    symbol: str


@router.get("/rates", summary="Exchange rates used for conversion")
async def get_rates(settings: Settings = Depends(get_settings_dep)):
    rates: Dict[str, float] = {
        Currency.USD.value: 1.0,
        Currency.KHR.value: settings.usd_to_khr_rate,
    }
    return {"base": Currency.USD.value, "rates": rates, "source": RATE_SOURCE}


@router.post("/convert", response_model=ConvertOut, summary="Convert an amount")
async def convert_amount(
    payload: ConvertIn, settings: Settings = Depends(get_settings_dep)
):
    source = Money(amount=payload.amount, currency=parse_currency(payload.from_currency))
    target = parse_currency(payload.to_currency)
    converted = convert(source, target, settings.usd_to_khr_rate)
    rate = convert(Money(amount=1.0, currency=source.currency), target, settings.usd_to_khr_rate)
    return ConvertOut(
        original=source,
        converted=Money(amount=round2(converted.amount), currency=target),
        rate=rate.amount,
    )


@router.get(
    "/supported", response_model=List[CurrencyInfoOut], summary="Supported currencies"
)
async def supported_currencies():
    return [
        CurrencyInfoOut(code=code, name=info["name"], symbol=info["symbol"])
        for code, info in CURRENCY_INFO.items()
    ]


@router.post("/format", summary="Format an amount for display")
async def format_amount(payload: FormatIn, settings: Settings = Depends(get_settings_dep)):
    money = Money(amount=payload.amount, currency=parse_currency(payload.currency))
    locale = payload.locale or settings.default_locale
    return {"formatted": format_money(money, locale), "locale": locale}
