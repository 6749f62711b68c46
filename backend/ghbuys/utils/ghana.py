from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from ghbuys.reference_data import (
    CURRENCY_DECIMALS,
    CURRENCY_SYMBOL,
    DEFAULT_DELIVERY_FEE,
    GPS_CODE_RE,
    MOBILE_MONEY_PROVIDERS,
    PHONE_RE,
    PROVIDER_ALIASES,
    REGIONS,
    MobileMoneyProvider,
    Region,
)

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Coerce a number or numeric string to a Decimal rounded to pesewas."""
    if isinstance(value, Decimal):
        d = value
    else:
        d = Decimal(str(value if value is not None else 0))
    return d.quantize(CENT, rounding=ROUND_HALF_UP)


def is_valid_phone_number(phone: str | None) -> bool:
    if not phone:
        return False
    return PHONE_RE.match(phone.strip()) is not None


def is_valid_gps_code(code: str | None) -> bool:
    if not code:
        return False
    return GPS_CODE_RE.match(code.strip()) is not None


def normalize_phone(phone: str) -> str:
    """Convert a local number to +233 international format."""
    p = (phone or "").strip().replace(" ", "")
    if p.startswith("+"):
        return p
    if p.startswith("0"):
        return f"+233{p[1:]}"
    if p.startswith("233"):
        return f"+{p}"
    return f"+233{p}"


def format_currency(amount) -> str:
    return f"{CURRENCY_SYMBOL}{to_money(amount):.{CURRENCY_DECIMALS}f}"


def calculate_total_tax(amount, *, vat: float, nhil: float, getfund: float) -> Decimal:
    base = to_money(amount)
    total = base * Decimal(str(vat)) + base * Decimal(str(nhil)) + base * Decimal(str(getfund))
    return to_money(total)


def region_by_code(code: str | None) -> Region | None:
    c = (code or "").strip().lower()
    for r in REGIONS:
        if r.code == c:
            return r
    return None


def region_by_name(name: str | None) -> Region | None:
    n = (name or "").strip().lower()
    for r in REGIONS:
        if r.name.lower() == n:
            return r
    return None


def delivery_fee_for(region: str | None) -> Decimal:
    r = region_by_code(region) or region_by_name(region)
    return r.delivery_fee if r else DEFAULT_DELIVERY_FEE


def canonical_provider_code(code: str | None) -> str:
    c = (code or "").strip().lower()
    return PROVIDER_ALIASES.get(c, c)


def mobile_money_provider(code: str | None) -> MobileMoneyProvider | None:
    c = canonical_provider_code(code)
    for p in MOBILE_MONEY_PROVIDERS:
        if p.code == c:
            return p
    return None
