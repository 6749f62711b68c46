from __future__ import annotations

from decimal import Decimal

from ghbuys.reference_data import (
    MOBILE_MONEY_FEES,
    MOBILE_MONEY_LIMITS,
    PAYSTACK_PROVIDER_CODES,
)
from ghbuys.utils.ghana import (
    CENT,
    format_currency,
    is_valid_phone_number,
    mobile_money_provider,
    normalize_phone,
    to_money,
)


class MobileMoneyError(ValueError):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


_INSTRUCTIONS = {
    "mtn": (
        "1. Dial {short_code} on your MTN line\n"
        "2. Select option 1 (Send Money)\n"
        "3. Enter Merchant Code when prompted\n"
        "4. Enter the amount to pay\n"
        "5. Enter your PIN to complete the transaction\n"
        "6. You will receive a confirmation SMS"
    ),
    "vodafone": (
        "1. Dial {short_code} on your Vodafone line\n"
        "2. Select option 1 (Transfer Money)\n"
        "3. Select option 3 (To Business)\n"
        "4. Enter the Merchant Code\n"
        "5. Enter the amount to pay\n"
        "6. Enter your PIN to confirm\n"
        "7. You will receive a confirmation SMS"
    ),
    "airtel_tigo": (
        "1. Dial {short_code} on your AirtelTigo line\n"
        "2. Select option 3 (Payments)\n"
        "3. Select option 1 (Pay Merchant)\n"
        "4. Enter the Merchant Code\n"
        "5. Enter the amount to pay\n"
        "6. Enter your PIN to complete\n"
        "7. You will receive a confirmation SMS"
    ),
}

FALLBACK_INSTRUCTIONS = "Follow the prompts on your mobile money app to complete the payment"

_GATEWAY_STATUS = {
    "success": "success",
    "failed": "failed",
    "abandoned": "abandoned",
}


def validate_request(phone: str, provider: str, amount=None) -> tuple[str, str]:
    """Validate a mobile money charge and return (normalized phone, canonical provider).

    Raises MobileMoneyError naming the offending field.
    """
    if not is_valid_phone_number(phone):
        raise MobileMoneyError("phone", "Invalid phone number format for Ghana")

    p = mobile_money_provider(provider)
    if p is None or not p.active:
        raise MobileMoneyError("provider", f"Mobile Money provider {provider} is not supported")

    if amount is not None:
        lo, hi, _daily = MOBILE_MONEY_LIMITS.get(p.code, MOBILE_MONEY_LIMITS["mtn"])
        a = to_money(amount)
        if a < lo or a > hi:
            raise MobileMoneyError(
                "amount",
                f"Amount must be between {format_currency(lo)} and {format_currency(hi)} for {p.name}",
            )

    return normalize_phone(phone), p.code


def paystack_provider_code(provider: str) -> str:
    p = mobile_money_provider(provider)
    code = p.code if p else (provider or "")
    return PAYSTACK_PROVIDER_CODES.get(code, code)


def display_text(provider: str, amount) -> str:
    p = mobile_money_provider(provider)
    name = p.name if p else provider
    return f"Please complete your {name} payment of {format_currency(amount)}"


def instructions(provider: str) -> str:
    p = mobile_money_provider(provider)
    if p is None:
        return FALLBACK_INSTRUCTIONS
    template = _INSTRUCTIONS.get(p.code)
    if not template:
        return FALLBACK_INSTRUCTIONS
    return template.format(short_code=p.short_code)


def calculate_fee(provider: str, amount) -> Decimal:
    p = mobile_money_provider(provider)
    pct, cap = MOBILE_MONEY_FEES.get(p.code if p else "", MOBILE_MONEY_FEES["mtn"])
    return min((to_money(amount) * pct).quantize(CENT), cap)


def provider_info(provider: str) -> dict:
    p = mobile_money_provider(provider)
    if p is None:
        raise MobileMoneyError("provider", f"Provider {provider} not found")
    lo, hi, daily = MOBILE_MONEY_LIMITS.get(p.code, MOBILE_MONEY_LIMITS["mtn"])
    pct, cap = MOBILE_MONEY_FEES.get(p.code, MOBILE_MONEY_FEES["mtn"])
    d = p.to_dict()
    d["limits"] = {"min": float(lo), "max": float(hi), "daily_limit": float(daily)}
    d["fees"] = {"percentage": float(pct), "cap": float(cap)}
    return d


def status_from_gateway(status: str | None) -> str:
    return _GATEWAY_STATUS.get((status or "").strip().lower(), "pending")
