"""
Landed Cost Domain Models (``landed_modules.landed_cost.models``).

Responsibility
--------------
Frozen value objects for the landed-cost module: voucher input and output,
allocated lines, per-category payables, party dues, settlements and the
result of finalizing a settlement.

Architecture position
---------------------
**Modules layer** -- pure data definitions.  No I/O, no database.  These
objects flow *into* and *out of* the voucher and settlement services as
immutable snapshots.

Invariants enforced
-------------------
* All monetary fields are ``Decimal`` (never ``float``).
* All dataclasses are ``frozen=True``.
* ``to_dict()`` renders money as fixed 3-dp strings, ids as strings and
  dates as ISO-8601.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from landed_kernel.db.types import ZERO, format_money


class PayableCategory(str, Enum):
    """The three independent payables carried by each voucher."""

    FREIGHT = "freight"
    PARTNER = "partner"
    PACKING = "packing"


class PayableStatus(str, Enum):
    """Payable workflow states.  Must align with ``PAYABLE_WORKFLOW.states``."""

    PENDING = "pending"
    PAID = "paid"


class SettlementPartyType(str, Enum):
    """Counter-party kind a settlement is raised for."""

    PARTNER = "partner"
    PACKING = "packing"
    LOGISTIC = "logistic"

    @property
    def category(self) -> PayableCategory:
        return SETTLEMENT_CATEGORY[self]


class SettlementStatus(str, Enum):
    """Settlement workflow states.  Must align with ``SETTLEMENT_WORKFLOW.states``."""

    PENDING = "pending"
    FINALIZED = "finalized"


SETTLEMENT_CATEGORY: dict[SettlementPartyType, PayableCategory] = {
    SettlementPartyType.LOGISTIC: PayableCategory.FREIGHT,
    SettlementPartyType.PARTNER: PayableCategory.PARTNER,
    SettlementPartyType.PACKING: PayableCategory.PACKING,
}


def _id(value: UUID | None) -> str | None:
    return str(value) if value is not None else None


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FreightLegInput:
    """
    A freight leg as entered: an amount in some currency and the rate
    snapshot that converts it to KWD.  A KWD amount needs no rate.
    """

    amount: Decimal | str | int
    currency: str = "KWD"
    fx_rate: Decimal | str | int | None = None


@dataclass(frozen=True)
class VoucherInput:
    """
    Everything needed to create or update a voucher.

    ``packing_charges_kwd=None`` means "use the configured per-unit rate".
    Freight legs may be plain KWD amounts or ``FreightLegInput``.
    """

    purchase_order_ids: tuple[UUID, ...]
    hk_to_dxb: FreightLegInput | Decimal | str | int | None = None
    dxb_to_kwi: FreightLegInput | Decimal | str | int | None = None
    total_partner_profit_kwd: Decimal | str | int | None = None
    packing_charges_kwd: Decimal | str | int | None = None
    freight_party_id: UUID | None = None
    partner_party_id: UUID | None = None
    packing_party_id: UUID | None = None
    voucher_date: date | None = None
    notes: str | None = None

    def party_for(self, category: PayableCategory) -> UUID | None:
        match PayableCategory(category):
            case PayableCategory.FREIGHT:
                return self.freight_party_id
            case PayableCategory.PARTNER:
                return self.partner_party_id
            case PayableCategory.PACKING:
                return self.packing_party_id


@dataclass(frozen=True)
class PaymentDetails:
    """How a payable (or settlement) was paid."""

    payment_type: str = "cash"
    payment_date: date | None = None
    reference: str | None = None
    account_ref: str | None = None
    notes: str | None = None


# ---------------------------------------------------------------------------
# Voucher
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FreightLeg:
    """Stored freight leg with its FX snapshot."""

    amount: Decimal
    currency: str
    fx_rate: Decimal
    amount_kwd: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "amount": f"{self.amount:f}",
            "currency": self.currency,
            "fx_rate": f"{self.fx_rate:f}",
            "amount_kwd": format_money(self.amount_kwd),
        }


@dataclass(frozen=True)
class VoucherLine:
    """An allocated line as persisted on a voucher."""

    id: UUID
    source_line_item_id: UUID | None
    purchase_order_id: UUID | None
    item_name: str
    item_category: str | None
    quantity: int
    unit_price_kwd: Decimal
    line_total_kwd: Decimal
    freight_per_unit_kwd: Decimal
    partner_profit_per_unit_kwd: Decimal
    packing_per_unit_kwd: Decimal
    landed_cost_per_unit_kwd: Decimal
    total_landed_cost_kwd: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": _id(self.id),
            "source_line_item_id": _id(self.source_line_item_id),
            "purchase_order_id": _id(self.purchase_order_id),
            "item_name": self.item_name,
            "item_category": self.item_category,
            "quantity": self.quantity,
            "unit_price_kwd": format_money(self.unit_price_kwd),
            "line_total_kwd": format_money(self.line_total_kwd),
            "freight_per_unit_kwd": format_money(self.freight_per_unit_kwd),
            "partner_profit_per_unit_kwd": format_money(self.partner_profit_per_unit_kwd),
            "packing_per_unit_kwd": format_money(self.packing_per_unit_kwd),
            "landed_cost_per_unit_kwd": format_money(self.landed_cost_per_unit_kwd),
            "total_landed_cost_kwd": format_money(self.total_landed_cost_kwd),
        }


@dataclass(frozen=True)
class Payable:
    """One category of one voucher, viewed as a payable."""

    voucher_id: UUID
    voucher_number: str
    voucher_date: date
    category: PayableCategory
    party_id: UUID | None
    amount_kwd: Decimal
    status: PayableStatus
    payment_id: UUID | None = None

    @property
    def is_owed(self) -> bool:
        """Pending with a party and something to pay."""
        return (
            self.status == PayableStatus.PENDING
            and self.party_id is not None
            and self.amount_kwd > ZERO
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "voucher_id": _id(self.voucher_id),
            "voucher_number": self.voucher_number,
            "voucher_date": _iso(self.voucher_date),
            "category": self.category.value,
            "party_id": _id(self.party_id),
            "amount_kwd": format_money(self.amount_kwd),
            "status": self.status.value,
            "payment_id": _id(self.payment_id),
        }


@dataclass(frozen=True)
class Voucher:
    """
    A landed cost voucher.

    Guarantees:
        - ``total_freight_kwd == hk_to_dxb.amount_kwd + dxb_to_kwi.amount_kwd``.
        - ``grand_total_kwd == total_freight_kwd + total_partner_profit_kwd
          + packing_charges_kwd``.
        - ``purchase_order_ids[0]`` is the primary PO.
    """

    id: UUID
    voucher_number: str
    voucher_date: date
    purchase_order_ids: tuple[UUID, ...]
    hk_to_dxb: FreightLeg
    dxb_to_kwi: FreightLeg
    total_freight_kwd: Decimal
    total_partner_profit_kwd: Decimal
    packing_charges_kwd: Decimal
    grand_total_kwd: Decimal
    line_items: tuple[VoucherLine, ...]
    freight_party_id: UUID | None
    partner_party_id: UUID | None
    packing_party_id: UUID | None
    payable_status: PayableStatus
    partner_payable_status: PayableStatus
    packing_payable_status: PayableStatus
    payment_id: UUID | None = None
    partner_payment_id: UUID | None = None
    packing_payment_id: UUID | None = None
    notes: str | None = None

    @property
    def primary_purchase_order_id(self) -> UUID:
        return self.purchase_order_ids[0]

    @property
    def hk_to_dxb_kwd(self) -> Decimal:
        return self.hk_to_dxb.amount_kwd

    @property
    def dxb_to_kwi_kwd(self) -> Decimal:
        return self.dxb_to_kwi.amount_kwd

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self.line_items)

    def payable(self, category: PayableCategory) -> Payable:
        """The voucher's payable for one category."""
        match PayableCategory(category):
            case PayableCategory.FREIGHT:
                party, amount = self.freight_party_id, self.total_freight_kwd
                status, payment = self.payable_status, self.payment_id
            case PayableCategory.PARTNER:
                party, amount = self.partner_party_id, self.total_partner_profit_kwd
                status, payment = self.partner_payable_status, self.partner_payment_id
            case PayableCategory.PACKING:
                party, amount = self.packing_party_id, self.packing_charges_kwd
                status, payment = self.packing_payable_status, self.packing_payment_id
        return Payable(
            voucher_id=self.id,
            voucher_number=self.voucher_number,
            voucher_date=self.voucher_date,
            category=PayableCategory(category),
            party_id=party,
            amount_kwd=amount,
            status=status,
            payment_id=payment,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": _id(self.id),
            "voucher_number": self.voucher_number,
            "voucher_date": _iso(self.voucher_date),
            "purchase_order_ids": [str(po_id) for po_id in self.purchase_order_ids],
            "hk_to_dxb": self.hk_to_dxb.to_dict(),
            "dxb_to_kwi": self.dxb_to_kwi.to_dict(),
            "hk_to_dxb_kwd": format_money(self.hk_to_dxb_kwd),
            "dxb_to_kwi_kwd": format_money(self.dxb_to_kwi_kwd),
            "total_freight_kwd": format_money(self.total_freight_kwd),
            "total_partner_profit_kwd": format_money(self.total_partner_profit_kwd),
            "packing_charges_kwd": format_money(self.packing_charges_kwd),
            "grand_total_kwd": format_money(self.grand_total_kwd),
            "line_items": [line.to_dict() for line in self.line_items],
            "freight_party_id": _id(self.freight_party_id),
            "partner_party_id": _id(self.partner_party_id),
            "packing_party_id": _id(self.packing_party_id),
            "payable_status": self.payable_status.value,
            "partner_payable_status": self.partner_payable_status.value,
            "packing_payable_status": self.packing_payable_status.value,
            "payment_id": _id(self.payment_id),
            "partner_payment_id": _id(self.partner_payment_id),
            "packing_payment_id": _id(self.packing_payment_id),
            "notes": self.notes,
        }


# ---------------------------------------------------------------------------
# Settlement
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PartyDues:
    """Pending dues of one party for one category."""

    party_id: UUID
    party_name: str
    voucher_count: int
    total_amount_kwd: Decimal
    vouchers: tuple[Payable, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "party_id": _id(self.party_id),
            "party_name": self.party_name,
            "voucher_count": self.voucher_count,
            "total_amount_kwd": format_money(self.total_amount_kwd),
            "vouchers": [v.to_dict() for v in self.vouchers],
        }


@dataclass(frozen=True)
class SettlementLine:
    """A voucher's category amount as snapshotted into a settlement."""

    voucher_id: UUID
    voucher_number: str
    amount_kwd: Decimal
    applied: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "voucher_id": _id(self.voucher_id),
            "voucher_number": self.voucher_number,
            "amount_kwd": format_money(self.amount_kwd),
            "applied": self.applied,
        }


@dataclass(frozen=True)
class Settlement:
    """
    A batched settlement of one party's dues for one category.

    Guarantees:
        - ``total_amount_kwd`` equals the sum of line amounts at creation.
        - The voucher set is fixed at creation.
    """

    id: UUID
    settlement_number: str
    party_type: SettlementPartyType
    party_id: UUID
    settlement_period: str
    settlement_date: date
    total_amount_kwd: Decimal
    lines: tuple[SettlementLine, ...]
    status: SettlementStatus
    payment_id: UUID | None = None
    account_ref: str | None = None
    notes: str | None = None
    finalized_at: datetime | None = None

    @property
    def category(self) -> PayableCategory:
        return self.party_type.category

    @property
    def voucher_ids(self) -> tuple[UUID, ...]:
        return tuple(line.voucher_id for line in self.lines)

    @property
    def voucher_count(self) -> int:
        return len(self.lines)

    @property
    def skipped_voucher_ids(self) -> tuple[UUID, ...]:
        return tuple(line.voucher_id for line in self.lines if line.applied is False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": _id(self.id),
            "settlement_number": self.settlement_number,
            "party_type": self.party_type.value,
            "party_id": _id(self.party_id),
            "settlement_period": self.settlement_period,
            "settlement_date": _iso(self.settlement_date),
            "total_amount_kwd": format_money(self.total_amount_kwd),
            "voucher_ids": [str(v) for v in self.voucher_ids],
            "voucher_count": self.voucher_count,
            "lines": [line.to_dict() for line in self.lines],
            "status": self.status.value,
            "payment_id": _id(self.payment_id),
            "account_ref": self.account_ref,
            "notes": self.notes,
            "finalized_at": _iso(self.finalized_at),
        }


@dataclass(frozen=True)
class FinalizeResult:
    """
    Outcome of finalizing a settlement.

    A voucher whose payable could not be flipped (already paid elsewhere,
    deleted, reassigned) is listed in ``skipped_voucher_ids``; the rest of
    the settlement still went through.
    """

    settlement: Settlement
    skipped_voucher_ids: tuple[UUID, ...] = field(default_factory=tuple)

    @property
    def fully_applied(self) -> bool:
        return not self.skipped_voucher_ids

    def to_dict(self) -> dict[str, Any]:
        return {
            "settlement": self.settlement.to_dict(),
            "skipped_voucher_ids": [str(v) for v in self.skipped_voucher_ids],
            "fully_applied": self.fully_applied,
        }
