"""Money / currency helpers.

Centralized so routes, the metrics engine and budget entries share one
conversion function and identical rounding semantics. No I/O here.

Supported currencies are USD and KHR. The USD->KHR rate defaults to a static
demo constant; callers pass the configured rate explicitly.
"""

from __future__ import annotations

import math
from decimal import Decimal, ROUND_HALF_UP, localcontext
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from budgetsheet.core.errors import UnsupportedCurrencyError, ValidationError

DEFAULT_USD_TO_KHR = 4100.0

# Enough digits to quantize any finite float (max ~1.8e308) to cents
_DECIMAL_PRECISION = 350


class Currency(str, Enum):
    USD = "USD"
    KHR = "KHR"


CURRENCY_INFO: Dict[Currency, Dict[str, str]] = {
    Currency.USD: {"name": "US Dollar", "symbol": "$"},
    Currency.KHR: {"name": "Cambodian Riel", "symbol": "៛"},
}

# (decimal places, symbol leads)
_DISPLAY_RULES: Dict[Currency, Tuple[int, bool]] = {
    Currency.USD: (2, True),
    Currency.KHR: (0, False),
}

# locale -> (group separator, decimal separator)
_LOCALE_SEPARATORS: Dict[str, Tuple[str, str]] = {
    "en-US": (",", "."),
    "en-GB": (",", "."),
    "km-KH": (",", "."),
    "de-DE": (".", ","),
    "fr-FR": (" ", ","),
}


class Money(BaseModel):
    amount: float
    currency: Currency

    model_config = ConfigDict(frozen=True)

    @field_validator("amount")
    @classmethod
    def finite_amount(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("amount must be a finite number")
        return v


def _quantize(value: float, decimals: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = _DECIMAL_PRECISION
        return Decimal(str(value)).quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)


def round2(value: float) -> float:
    return float(_quantize(value, 2))


def _checked(amount: float, currency: Currency) -> Money:
    if not math.isfinite(amount):
        raise ValidationError(f"{currency.value} amount out of range")
    return Money(amount=amount, currency=currency)


def quantize(m: Money) -> Money:
    """Round to the currency's minor unit: cents for USD, whole riel for KHR."""
    decimals, _ = _DISPLAY_RULES[m.currency]
    return Money(amount=float(_quantize(m.amount, decimals)), currency=m.currency)


def parse_currency(code: str) -> Currency:
    if isinstance(code, Currency):
        return code
    try:
        return Currency(str(code).strip().upper())
    except ValueError:
        raise UnsupportedCurrencyError(f"unsupported currency '{code}'") from None


def zero(currency: Currency) -> Money:
    return Money(amount=0.0, currency=currency)


def convert(m: Money, target: Currency, rate: Optional[float] = None) -> Money:
    """Convert ``m`` into ``target``.

    ``rate`` is KHR per 1 USD; defaults to DEFAULT_USD_TO_KHR.
    """
    target = parse_currency(target)
    if m.currency == target:
        return m
    rate = DEFAULT_USD_TO_KHR if rate is None else rate
    if rate <= 0:
        raise ValueError("exchange rate must be positive")
    if m.currency == Currency.USD and target == Currency.KHR:
        return _checked(m.amount * rate, target)
    if m.currency == Currency.KHR and target == Currency.USD:
        return _checked(m.amount / rate, target)
    raise UnsupportedCurrencyError(
        f"no conversion from {m.currency.value} to {target.value}"
    )


def add(
    a: Money, b: Money, target: Optional[Currency] = None, rate: Optional[float] = None
) -> Money:
    currency = target or a.currency
    ca = convert(a, currency, rate)
    cb = convert(b, currency, rate)
    return _checked(ca.amount + cb.amount, currency)


def subtract(
    a: Money, b: Money, target: Optional[Currency] = None, rate: Optional[float] = None
) -> Money:
    currency = target or a.currency
    ca = convert(a, currency, rate)
    cb = convert(b, currency, rate)
    return _checked(ca.amount - cb.amount, currency)


def total(
    items: Iterable[Money], target: Currency, rate: Optional[float] = None
) -> Money:
    acc = 0.0
    for m in items:
        acc += convert(m, target, rate).amount
    return _checked(acc, target)


def format_money(m: Money, locale: str = "en-US") -> str:
    """Render with per-currency precision: USD ``$1,234.50``, KHR ``4,100៛``."""
    decimals, leading = _DISPLAY_RULES[m.currency]
    group, point = _LOCALE_SEPARATORS.get(locale, _LOCALE_SEPARATORS["en-US"])
    value = _quantize(abs(m.amount), decimals)
    with localcontext() as ctx:
        ctx.prec = _DECIMAL_PRECISION
        raw = f"{value:,.{decimals}f}"
    body = raw.replace(",", "\0").replace(".", point).replace("\0", group)
    sign = "-" if m.amount < 0 and value != 0 else ""
    symbol = CURRENCY_INFO[m.currency]["symbol"]
    if leading:
        return f"{sign}{symbol}{body}"
    return f"{sign}{body}{symbol}"
