"""
Service layer for outgoing payments.

The default PaymentSink.  Records one append-only Payment row per call and
returns its id; the caller links that id to whatever was settled.
"""

from __future__ import annotations

from uuid import UUID

from landed_kernel.db.types import round_money
from landed_kernel.domain.dtos import PaymentRequest
from landed_kernel.exceptions import ValidationError
from landed_kernel.logging_config import get_logger
from landed_kernel.models.payment import Payment, PaymentDirection
from landed_kernel.services.base import BaseService

logger = get_logger("services.payment")


class PaymentService(BaseService[Payment]):
    """Writes Payment rows.  Flushes, never commits."""

    def record_payment(self, request: PaymentRequest, actor_id: UUID) -> UUID:
        """
        Persist an outgoing payment.

        Raises:
            ValidationError: If the amount is not strictly positive.
        """
        amount = round_money(request.amount_kwd)
        if amount <= 0:
            raise ValidationError(
                f"Payment amount must be positive, got {amount}",
                field="amount_kwd",
            )
        payment = Payment(
            payee_id=request.payee_id,
            amount_kwd=amount,
            payment_date=request.payment_date,
            direction=PaymentDirection.OUT.value,
            payment_type=request.payment_type,
            reference=request.reference,
            account_ref=request.account_ref,
            notes=request.notes,
            created_by_id=actor_id,
        )
        self.session.add(payment)
        self.session.flush()
        logger.info(
            "payment_recorded",
            extra={
                "payment_id": str(payment.id),
                "payee_id": str(request.payee_id),
                "amount_kwd": str(amount),
            },
        )
        return payment.id

    def get_payment(self, payment_id: UUID) -> Payment | None:
        return self.session.get(Payment, payment_id)
