from decimal import Decimal, ROUND_HALF_UP

from ghbuys.utils.ghana import CENT, to_money

# Default platform commission withheld from each vendor's gross sale
PLATFORM_COMMISSION_RATE = Decimal("0.05")


def compute_commission(amount, rate=PLATFORM_COMMISSION_RATE) -> Decimal:
    a = to_money(amount)
    r = Decimal(str(rate or 0))
    if a < 0:
        a = Decimal("0.00")
    if r < 0:
        r = Decimal("0")
    return (a * r).quantize(CENT, rounding=ROUND_HALF_UP)


def split_amount(gross, rate=PLATFORM_COMMISSION_RATE) -> tuple[Decimal, Decimal]:
    """Return (net, commission) such that net + commission == gross to the pesewa."""
    g = to_money(gross)
    commission = compute_commission(g, rate)
    return g - commission, commission
