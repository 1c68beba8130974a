"""
External collaborators of the landed-cost module.

The voucher and settlement services depend on these protocols only; the
SQLAlchemy-backed kernel services are the default implementations.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable
from uuid import UUID

from landed_kernel.domain.dtos import LineItemInfo, PartyInfo, PaymentRequest


@runtime_checkable
class PurchaseOrderDirectory(Protocol):
    """Read access to purchase orders."""

    def list_line_items(self, purchase_order_id: UUID) -> list[LineItemInfo]:
        """Return the PO's lines in order.

        Raises:
            PurchaseOrderNotFoundError: When the PO does not exist.
        """
        ...


@runtime_checkable
class PartyDirectory(Protocol):
    """Read access to parties."""

    def get_party(self, party_id: UUID) -> PartyInfo:
        """Raises PartyNotFoundError when the party does not exist."""
        ...


@runtime_checkable
class VoucherNumbering(Protocol):
    """Issues human-readable document numbers."""

    def next_voucher_number(self) -> str:
        ...

    def peek_voucher_number(self) -> str:
        ...

    def next_settlement_number(self, year: int) -> str:
        ...


@runtime_checkable
class PaymentSink(Protocol):
    """Records outgoing payments."""

    def record_payment(self, request: PaymentRequest, actor_id: UUID) -> UUID:
        """Persist the payment and return its id."""
        ...
