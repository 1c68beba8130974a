"""
Kernel DTOs exchanged between the kernel services and the modules.

All are frozen dataclasses with no ORM dependencies, so the landed-cost
module can be driven by any directory implementation, not only the
SQLAlchemy-backed ones in ``landed_kernel.services``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID


@dataclass(frozen=True)
class PartyInfo:
    """Read-only view of a party."""

    id: UUID
    party_code: str
    party_type: str
    name: str
    is_active: bool


@dataclass(frozen=True)
class LineItemInfo:
    """A purchase order line as seen by the allocation step."""

    id: UUID | None
    purchase_order_id: UUID | None
    item_name: str
    item_category: str | None
    quantity: int
    unit_price_kwd: Decimal


@dataclass(frozen=True)
class NewLineItem:
    """Line item supplied when creating a purchase order."""

    item_name: str
    quantity: int
    unit_price_kwd: Decimal
    item_category: str | None = None


@dataclass(frozen=True)
class PaymentRequest:
    """An outgoing payment to be recorded by a PaymentSink."""

    payee_id: UUID
    amount_kwd: Decimal
    payment_date: date
    payment_type: str = "cash"
    reference: str | None = None
    account_ref: str | None = None
    notes: str | None = None
