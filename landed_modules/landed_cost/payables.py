"""
Payable State Machine (``landed_modules.landed_cost.payables``).

Responsibility
--------------
One generic implementation of the ``pending -> paid`` payable, keyed by
``PayableCategory``.  Freight, partner-profit and packing differ only in
which voucher columns hold their party, amount, status and payment id.

Architecture position
---------------------
**Modules layer** -- flush-only helper used by ``LandedCostVoucherService``
and ``SettlementService``.  Never commits; callers own the transaction and
wrap each payment in a savepoint.

Invariants enforced
-------------------
* The status flip is a compare-and-set
  (``UPDATE ... WHERE <status> = 'pending'``).  Exactly one concurrent
  payer wins; the loser gets ``InvalidStateError``.
* Freight is born ``pending``.  Partner and packing are born ``paid``
  when there is nothing to collect: no party, or a zero amount.
* ``paid`` is terminal.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Select, select, update
from sqlalchemy.orm import Session

from landed_kernel.db.types import ZERO, format_money
from landed_kernel.domain.clock import Clock
from landed_kernel.domain.directories import PaymentSink
from landed_kernel.domain.dtos import PaymentRequest
from landed_kernel.exceptions import InvalidStateError
from landed_kernel.logging_config import get_logger
from landed_modules.landed_cost.models import PayableCategory, PayableStatus, PaymentDetails
from landed_modules.landed_cost.orm import LandedCostVoucherModel
from landed_modules.landed_cost.workflows import (
    AMOUNT_POSITIVE,
    PAYABLE_WORKFLOW,
    PAYEE_ASSIGNED,
)

logger = get_logger("modules.landed_cost.payables")

MARK_PAID = "mark_paid"


@dataclass(frozen=True)
class PayableColumns:
    """Voucher column names backing one payable category."""

    status: str
    payment_id: str
    party_id: str
    amount: str


PAYABLE_COLUMNS: dict[PayableCategory, PayableColumns] = {
    PayableCategory.FREIGHT: PayableColumns(
        status="payable_status",
        payment_id="payment_id",
        party_id="freight_party_id",
        amount="total_freight_kwd",
    ),
    PayableCategory.PARTNER: PayableColumns(
        status="partner_payable_status",
        payment_id="partner_payment_id",
        party_id="partner_party_id",
        amount="total_partner_profit_kwd",
    ),
    PayableCategory.PACKING: PayableColumns(
        status="packing_payable_status",
        payment_id="packing_payment_id",
        party_id="packing_party_id",
        amount="packing_charges_kwd",
    ),
}


def initial_status(
    category: PayableCategory,
    party_id: UUID | None,
    amount: Decimal,
) -> PayableStatus:
    """
    Status a category is born with.

    Freight always starts pending.  Partner and packing with nothing to
    collect (no party, or zero amount) are paid from birth.
    """
    if PayableCategory(category) is PayableCategory.FREIGHT:
        return PayableStatus.PENDING
    if party_id is None or amount <= ZERO:
        return PayableStatus.PAID
    return PayableStatus.PENDING


def payable_state(voucher: LandedCostVoucherModel, category: PayableCategory):
    """(party_id, amount, status, payment_id) of one category."""
    cols = PAYABLE_COLUMNS[PayableCategory(category)]
    return (
        getattr(voucher, cols.party_id),
        getattr(voucher, cols.amount),
        PayableStatus(getattr(voucher, cols.status)),
        getattr(voucher, cols.payment_id),
    )


def owed_payables_query(
    category: PayableCategory,
    party_id: UUID | None = None,
) -> Select:
    """Vouchers whose category is pending, has a party and a positive amount."""
    cols = PAYABLE_COLUMNS[PayableCategory(category)]
    party_column = getattr(LandedCostVoucherModel, cols.party_id)
    stmt = select(LandedCostVoucherModel).where(
        getattr(LandedCostVoucherModel, cols.status) == PayableStatus.PENDING.value,
        party_column.is_not(None),
        getattr(LandedCostVoucherModel, cols.amount) > ZERO,
    )
    if party_id is not None:
        stmt = stmt.where(party_column == party_id)
    return stmt.order_by(
        LandedCostVoucherModel.voucher_date,
        LandedCostVoucherModel.voucher_number,
    )


class PayableStateMachine:
    """
    Applies ``PAYABLE_WORKFLOW`` to a voucher category.

    Guarantees:
        - ``pay`` records exactly one payment and flips exactly one status,
          or raises having flipped nothing.
    Non-goals:
        - Transaction management.  Run inside ``session.begin_nested()``
          so a failed flip also discards the recorded payment.
    """

    def __init__(self, session: Session, payments: PaymentSink, clock: Clock):
        self._session = session
        self._payments = payments
        self._clock = clock

    def check_payable(self, voucher: LandedCostVoucherModel, category: PayableCategory) -> None:
        """
        Evaluate the transition and its guards against the loaded voucher.

        Raises:
            InvalidStateError: Already paid, no payee, or nothing to pay.
        """
        category = PayableCategory(category)
        party_id, amount, status, _ = payable_state(voucher, category)
        entity_id = f"{voucher.voucher_number}/{category.value}"

        transition = PAYABLE_WORKFLOW.find_transition(status.value, MARK_PAID)
        if transition is None:
            raise InvalidStateError("payable", entity_id, status.value, "already paid")
        if party_id is None:
            raise InvalidStateError(
                "payable", entity_id, status.value, f"{PAYEE_ASSIGNED.name}: no party assigned"
            )
        if amount <= ZERO:
            raise InvalidStateError(
                "payable", entity_id, status.value, f"{AMOUNT_POSITIVE.name}: nothing to pay"
            )

    def mark_paid(
        self,
        voucher: LandedCostVoucherModel,
        category: PayableCategory,
        payment_id: UUID,
        actor_id: UUID,
    ) -> None:
        """
        Compare-and-set the category from pending to paid.

        Raises:
            InvalidStateError: The row was no longer pending.
        """
        category = PayableCategory(category)
        cols = PAYABLE_COLUMNS[category]
        status_column = getattr(LandedCostVoucherModel, cols.status)

        stmt = (
            update(LandedCostVoucherModel)
            .where(LandedCostVoucherModel.id == voucher.id)
            .where(status_column == PayableStatus.PENDING.value)
            .values(
                {
                    cols.status: PayableStatus.PAID.value,
                    cols.payment_id: payment_id,
                    "updated_by_id": actor_id,
                }
            )
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        if result.rowcount != 1:
            logger.warning(
                "payable_compare_and_set_lost",
                extra={
                    "voucher_id": str(voucher.id),
                    "category": category.value,
                },
            )
            raise InvalidStateError(
                "payable",
                f"{voucher.voucher_number}/{category.value}",
                PayableStatus.PAID.value,
                "paid concurrently",
            )
        self._session.expire(voucher)

        logger.info(
            "payable_marked_paid",
            extra={
                "voucher_id": str(voucher.id),
                "category": category.value,
                "payment_id": str(payment_id),
            },
        )

    def pay(
        self,
        voucher: LandedCostVoucherModel,
        category: PayableCategory,
        details: PaymentDetails,
        actor_id: UUID,
    ) -> UUID:
        """
        Record a payment for the category's full amount and flip it to paid.

        Returns:
            The recorded payment id.
        """
        category = PayableCategory(category)
        self.check_payable(voucher, category)
        party_id, amount, _, _ = payable_state(voucher, category)

        payment_id = self._payments.record_payment(
            PaymentRequest(
                payee_id=party_id,
                amount_kwd=amount,
                payment_date=details.payment_date or self._clock.today(),
                payment_type=details.payment_type,
                reference=details.reference or voucher.voucher_number,
                account_ref=details.account_ref,
                notes=details.notes
                or f"{category.value.capitalize()} payment for {voucher.voucher_number}",
            ),
            actor_id,
        )
        logger.info(
            "payable_payment_recorded",
            extra={
                "voucher_id": str(voucher.id),
                "category": category.value,
                "amount_kwd": format_money(amount),
            },
        )
        self.mark_paid(voucher, category, payment_id, actor_id)
        return payment_id
