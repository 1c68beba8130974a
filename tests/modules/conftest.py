"""
Shared fixtures for landed-cost module tests.

DESIGN RULE: Every fixture is opt-in.  No autouse.  Each test declares the
parties and vouchers it depends on in its function signature.
"""

from decimal import Decimal

import pytest

from landed_modules.landed_cost.models import VoucherInput


@pytest.fixture
def make_voucher(voucher_service, create_po, test_actor_id):
    """
    Factory creating a voucher over a fresh 10-unit purchase order.

    Charges default to zero and packing to an explicit "0" so each test
    sets only the category it exercises.
    """

    def _make(
        *,
        purchase_order_ids=None,
        hk_to_dxb=None,
        dxb_to_kwi=None,
        partner_amount=None,
        packing_amount="0",
        freight_party_id=None,
        partner_party_id=None,
        packing_party_id=None,
        notes=None,
    ):
        if purchase_order_ids is None:
            purchase_order_ids = (create_po(("Widget", 10, "1.000")),)
        return voucher_service.create_voucher(
            VoucherInput(
                purchase_order_ids=tuple(purchase_order_ids),
                hk_to_dxb=hk_to_dxb,
                dxb_to_kwi=dxb_to_kwi,
                total_partner_profit_kwd=partner_amount,
                packing_charges_kwd=packing_amount,
                freight_party_id=freight_party_id,
                partner_party_id=partner_party_id,
                packing_party_id=packing_party_id,
                notes=notes,
            ),
            actor_id=test_actor_id,
        )

    return _make


@pytest.fixture
def partner_vouchers(make_voucher, partner):
    """Three pending partner vouchers: 10.000, 20.000 and 5.000."""
    return [
        make_voucher(partner_amount=Decimal(amount), partner_party_id=partner.id)
        for amount in ("10.000", "20.000", "5.000")
    ]
