"""
Tests for PaymentService, the default PaymentSink.
"""

from datetime import date
from decimal import Decimal

import pytest

from landed_kernel.domain.directories import PaymentSink
from landed_kernel.domain.dtos import PaymentRequest
from landed_kernel.exceptions import ValidationError
from landed_kernel.models.payment import PaymentDirection


class TestPaymentService:

    def test_satisfies_sink_protocol(self, payment_service):
        assert isinstance(payment_service, PaymentSink)

    def test_record_payment(self, payment_service, forwarder, test_actor_id, captured_logs):
        payment_id = payment_service.record_payment(
            PaymentRequest(
                payee_id=forwarder.id,
                amount_kwd=Decimal("30.0004"),
                payment_date=date(2025, 3, 14),
                payment_type="bank_transfer",
                reference="LCV-0001",
                account_ref="NBK-001",
            ),
            test_actor_id,
        )

        payment = payment_service.get_payment(payment_id)
        assert payment.payee_id == forwarder.id
        assert payment.amount_kwd == Decimal("30.000")
        assert payment.direction == PaymentDirection.OUT.value
        assert payment.account_ref == "NBK-001"
        assert any(r["message"] == "payment_recorded" for r in captured_logs())

    @pytest.mark.parametrize("amount", ["0", "-5", "0.0004"])
    def test_amount_must_be_positive(self, payment_service, forwarder, test_actor_id, amount):
        with pytest.raises(ValidationError):
            payment_service.record_payment(
                PaymentRequest(
                    payee_id=forwarder.id,
                    amount_kwd=Decimal(amount),
                    payment_date=date(2025, 3, 14),
                ),
                test_actor_id,
            )
