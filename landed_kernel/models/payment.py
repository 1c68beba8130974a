"""
Module: landed_kernel.models.payment
Responsibility: ORM persistence for outgoing payments recorded when a
    payable is settled, either one category at a time or as a batched
    settlement.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - amount_kwd is strictly positive (ck_payment_amount_positive).
    - Payment rows are append-only; nothing in the ledger updates them.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from landed_kernel.db.base import TrackedBase


class PaymentDirection(str, Enum):
    IN = "IN"
    OUT = "OUT"


class Payment(TrackedBase):
    """An outgoing (or incoming) payment to a party, in KWD."""

    __tablename__ = "payments"

    __table_args__ = (
        Index("idx_payment_payee", "payee_id"),
        Index("idx_payment_date", "payment_date"),
        CheckConstraint("amount_kwd > 0", name="ck_payment_amount_positive"),
    )

    payee_id: Mapped[UUID] = mapped_column(ForeignKey("parties.id"), nullable=False)

    amount_kwd: Mapped[Decimal] = mapped_column(nullable=False)

    payment_date: Mapped[date] = mapped_column(Date, nullable=False)

    direction: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        default=PaymentDirection.OUT.value,
    )

    # e.g. "cash", "bank_transfer", "cheque"
    payment_type: Mapped[str] = mapped_column(String(30), nullable=False)

    reference: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Cash/bank account the money left from
    account_ref: Mapped[str | None] = mapped_column(String(100), nullable=True)

    notes: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    def __repr__(self) -> str:
        return f"<Payment {self.id} {self.amount_kwd} -> {self.payee_id}>"
