from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable

from ghbuys.models import OrderItem, Vendor, VendorPayout
from ghbuys.utils.commission import PLATFORM_COMMISSION_RATE, split_amount
from ghbuys.utils.ghana import to_money


@dataclass
class PayoutIntent:
    vendor_id: int
    order_id: int | None
    amount: Decimal  # net to vendor
    gross: Decimal
    commission: Decimal
    currency: str
    reference: str
    item_ids: list[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "vendor_id": self.vendor_id,
            "order_id": self.order_id,
            "amount": float(self.amount),
            "gross": float(self.gross),
            "commission": float(self.commission),
            "currency": self.currency,
            "reference": self.reference,
            "item_ids": list(self.item_ids),
        }


def payout_reference(payment_reference: str, vendor_id: int) -> str:
    return f"payout_{payment_reference}_{vendor_id}"


def split_vendor_payouts(
    items: Iterable[OrderItem],
    reference: str,
    *,
    rate=PLATFORM_COMMISSION_RATE,
    currency: str = "GHS",
    order_id: int | None = None,
) -> list[PayoutIntent]:
    """Group line items by vendor and withhold the platform commission per vendor.

    Items without a vendor are skipped. Intents come back in the order each
    vendor first appears.
    """
    gross_by_vendor: dict[int, Decimal] = {}
    items_by_vendor: dict[int, list[int]] = {}
    for it in items:
        if it.vendor_id is None:
            continue
        vid = int(it.vendor_id)
        line = to_money(it.unit_price) * int(it.quantity or 0)
        gross_by_vendor[vid] = gross_by_vendor.get(vid, Decimal("0.00")) + line
        items_by_vendor.setdefault(vid, []).append(it.id)

    intents = []
    for vid, gross in gross_by_vendor.items():
        net, commission = split_amount(gross, rate)
        intents.append(PayoutIntent(
            vendor_id=vid,
            order_id=order_id,
            amount=net,
            gross=to_money(gross),
            commission=commission,
            currency=currency,
            reference=payout_reference(reference, vid),
            item_ids=items_by_vendor[vid],
        ))
    return intents


def queue_vendor_payouts(session, intents: list[PayoutIntent], *, payment_reference: str) -> list[VendorPayout]:
    """Persist intents as pending payouts and roll vendor sales forward (caller commits)."""
    rows = []
    for intent in intents:
        row = VendorPayout(
            vendor_id=intent.vendor_id,
            order_id=intent.order_id,
            payment_reference=payment_reference,
            reference=intent.reference,
            gross_amount=intent.gross,
            commission_amount=intent.commission,
            amount=intent.amount,
            currency=intent.currency,
            item_ids=list(intent.item_ids),
            status="pending",
        )
        session.add(row)
        rows.append(row)

        vendor = session.get(Vendor, intent.vendor_id)
        if vendor is not None:
            vendor.total_sales = to_money(vendor.total_sales or 0) + intent.gross
            vendor.total_orders = int(vendor.total_orders or 0) + 1
    return rows


def update_vendor_payout_status(session, *, vendor_id: int, reference: str, status: str, reason: str = "") -> VendorPayout | None:
    """Apply a transfer outcome to the vendor's payout; returns None when nothing matches."""
    row = (
        session.query(VendorPayout)
        .filter(VendorPayout.vendor_id == int(vendor_id))
        .filter((VendorPayout.reference == reference) | (VendorPayout.transfer_reference == reference))
        .first()
    )
    if row is None:
        return None
    row.status = status
    if not row.transfer_reference:
        row.transfer_reference = reference
    if reason:
        row.failure_reason = reason[:255]
    return row
