"""
Tests for LandedCostVoucherService.

Covers the pooled multi-PO allocation end to end, FX freight legs, input
validation, the default-paid rule, updates that fall back to persisted
lines, and deletion against pending and finalized settlements.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from landed_config.schema import LandedCostConfig
from landed_kernel.exceptions import (
    ConflictError,
    PurchaseOrderNotFoundError,
    SettlementNotFoundError,
    ValidationError,
    VoucherNotFoundError,
)
from landed_kernel.models.party import PartyType
from landed_modules.landed_cost.models import (
    FreightLegInput,
    PayableCategory,
    PayableStatus,
    PaymentDetails,
    SettlementPartyType,
    VoucherInput,
)
from landed_modules.landed_cost.service import LandedCostVoucherService


class MissingPurchaseOrders:
    """Purchase order directory whose orders can no longer be read."""

    def list_line_items(self, purchase_order_id):
        raise PurchaseOrderNotFoundError(str(purchase_order_id))


def _pooled_input(po_ids, forwarder, partner, **overrides):
    values = dict(
        purchase_order_ids=tuple(po_ids),
        hk_to_dxb="30.000",
        dxb_to_kwi="0",
        total_partner_profit_kwd="15.000",
        packing_charges_kwd="0.000",
        freight_party_id=forwarder.id,
        partner_party_id=partner.id,
    )
    values.update(overrides)
    return VoucherInput(**values)


# =============================================================================
# Create
# =============================================================================


class TestCreateVoucher:

    def test_pooled_allocation_end_to_end(
        self, voucher_service, two_purchase_orders, forwarder, partner, test_actor_id
    ):
        voucher = voucher_service.create_voucher(
            _pooled_input(two_purchase_orders, forwarder, partner), test_actor_id
        )

        assert voucher.voucher_number == "LCV-0001"
        assert voucher.voucher_date == date(2025, 3, 14)
        assert voucher.purchase_order_ids == two_purchase_orders
        assert voucher.primary_purchase_order_id == two_purchase_orders[0]
        assert voucher.total_quantity == 15
        assert voucher.total_freight_kwd == Decimal("30.000")
        assert voucher.grand_total_kwd == Decimal("45.000")

        first, second = voucher.line_items
        assert first.item_name == "Phone case"
        assert first.purchase_order_id == two_purchase_orders[0]
        assert second.purchase_order_id == two_purchase_orders[1]
        for line in voucher.line_items:
            assert line.freight_per_unit_kwd == Decimal("2.000")
            assert line.partner_profit_per_unit_kwd == Decimal("1.000")
            assert line.packing_per_unit_kwd == Decimal("0.000")
        assert first.landed_cost_per_unit_kwd == Decimal("8.000")
        assert first.total_landed_cost_kwd == Decimal("80.000")
        assert second.landed_cost_per_unit_kwd == Decimal("11.000")

    def test_to_dict_renders_money_as_fixed_strings(
        self, voucher_service, two_purchase_orders, forwarder, partner, test_actor_id
    ):
        voucher = voucher_service.create_voucher(
            _pooled_input(two_purchase_orders, forwarder, partner), test_actor_id
        )

        data = voucher.to_dict()

        assert data["grand_total_kwd"] == "45.000"
        assert data["packing_charges_kwd"] == "0.000"
        assert data["hk_to_dxb"]["currency"] == "KWD"
        assert data["line_items"][0]["landed_cost_per_unit_kwd"] == "8.000"
        assert data["payable_status"] == "pending"
        assert data["purchase_order_ids"] == [str(po) for po in two_purchase_orders]

    def test_voucher_numbers_increase(self, make_voucher):
        assert make_voucher().voucher_number == "LCV-0001"
        assert make_voucher().voucher_number == "LCV-0002"

    def test_next_voucher_number_is_a_peek(self, voucher_service, make_voucher):
        assert voucher_service.next_voucher_number() == "LCV-0001"
        assert voucher_service.next_voucher_number() == "LCV-0001"

        make_voucher()

        assert voucher_service.next_voucher_number() == "LCV-0002"

    def test_explicit_date_and_notes(
        self, voucher_service, two_purchase_orders, forwarder, partner, test_actor_id
    ):
        voucher = voucher_service.create_voucher(
            _pooled_input(
                two_purchase_orders,
                forwarder,
                partner,
                voucher_date=date(2025, 2, 28),
                notes="Air shipment",
            ),
            test_actor_id,
        )

        assert voucher.voucher_date == date(2025, 2, 28)
        assert voucher.notes == "Air shipment"

    def test_logs_creation(
        self, voucher_service, two_purchase_orders, forwarder, partner, test_actor_id,
        captured_logs,
    ):
        voucher_service.create_voucher(
            _pooled_input(two_purchase_orders, forwarder, partner), test_actor_id
        )

        created = [r for r in captured_logs() if r["message"] == "voucher_created"]
        assert len(created) == 1
        assert created[0]["voucher_number"] == "LCV-0001"
        assert created[0]["grand_total_kwd"] == "45.000"
        assert created[0]["actor_id"] == str(test_actor_id)


class TestPackingDefault:

    def test_missing_packing_uses_rate_per_unit(
        self, voucher_service, two_purchase_orders, test_actor_id
    ):
        voucher = voucher_service.create_voucher(
            VoucherInput(purchase_order_ids=two_purchase_orders), test_actor_id
        )

        assert voucher.packing_charges_kwd == Decimal("3.150")
        assert voucher.grand_total_kwd == Decimal("3.150")
        assert voucher.line_items[0].packing_per_unit_kwd == Decimal("0.210")

    def test_configured_rate(self, session, deterministic_clock, two_purchase_orders, test_actor_id):
        service = LandedCostVoucherService(
            session,
            config=LandedCostConfig(packing_rate_per_unit=Decimal("0.100")),
            clock=deterministic_clock,
        )

        voucher = service.create_voucher(
            VoucherInput(purchase_order_ids=two_purchase_orders), test_actor_id
        )

        assert voucher.packing_charges_kwd == Decimal("1.500")

    def test_explicit_zero_is_kept(self, voucher_service, two_purchase_orders, test_actor_id):
        voucher = voucher_service.create_voucher(
            VoucherInput(purchase_order_ids=two_purchase_orders, packing_charges_kwd="0"),
            test_actor_id,
        )

        assert voucher.packing_charges_kwd == Decimal("0.000")


class TestForeignCurrencyFreight:

    def test_leg_converted_with_entered_rate(
        self, voucher_service, two_purchase_orders, forwarder, test_actor_id
    ):
        voucher = voucher_service.create_voucher(
            VoucherInput(
                purchase_order_ids=two_purchase_orders,
                hk_to_dxb=FreightLegInput(amount="100.00", currency="USD", fx_rate="0.307"),
                dxb_to_kwi="5.000",
                packing_charges_kwd="0",
                freight_party_id=forwarder.id,
            ),
            test_actor_id,
        )

        assert voucher.hk_to_dxb.currency == "USD"
        assert voucher.hk_to_dxb.fx_rate == Decimal("0.307")
        assert voucher.hk_to_dxb_kwd == Decimal("30.700")
        assert voucher.total_freight_kwd == Decimal("35.700")

    def test_kwd_leg_needs_no_rate(
        self, voucher_service, two_purchase_orders, forwarder, test_actor_id
    ):
        voucher = voucher_service.create_voucher(
            VoucherInput(
                purchase_order_ids=two_purchase_orders,
                dxb_to_kwi=FreightLegInput(amount="7.500"),
                packing_charges_kwd="0",
                freight_party_id=forwarder.id,
            ),
            test_actor_id,
        )

        assert voucher.dxb_to_kwi.fx_rate == Decimal("1")
        assert voucher.total_freight_kwd == Decimal("7.500")

    def test_missing_rate_rejected(
        self, voucher_service, two_purchase_orders, forwarder, test_actor_id
    ):
        with pytest.raises(ValidationError) as exc_info:
            voucher_service.create_voucher(
                VoucherInput(
                    purchase_order_ids=two_purchase_orders,
                    hk_to_dxb=FreightLegInput(amount="100", currency="USD"),
                    freight_party_id=forwarder.id,
                ),
                test_actor_id,
            )
        assert exc_info.value.field == "hk_to_dxb.fx_rate"

    def test_unknown_currency_rejected(
        self, voucher_service, two_purchase_orders, forwarder, test_actor_id
    ):
        with pytest.raises(ValidationError) as exc_info:
            voucher_service.create_voucher(
                VoucherInput(
                    purchase_order_ids=two_purchase_orders,
                    hk_to_dxb=FreightLegInput(amount="100", currency="XXQ", fx_rate="1"),
                    freight_party_id=forwarder.id,
                ),
                test_actor_id,
            )
        assert exc_info.value.field == "hk_to_dxb.currency"


# =============================================================================
# Validation
# =============================================================================


class TestCreateValidation:

    def test_no_purchase_order(self, voucher_service, test_actor_id):
        with pytest.raises(ValidationError) as exc_info:
            voucher_service.create_voucher(VoucherInput(purchase_order_ids=()), test_actor_id)
        assert exc_info.value.field == "purchase_order_ids"

    def test_duplicate_purchase_order(self, voucher_service, create_po, test_actor_id):
        po = create_po(("Cable", 3, "1.000"))

        with pytest.raises(ValidationError):
            voucher_service.create_voucher(
                VoucherInput(purchase_order_ids=(po, po)), test_actor_id
            )

    def test_unknown_purchase_order_consumes_no_number(self, voucher_service, test_actor_id):
        with pytest.raises(PurchaseOrderNotFoundError):
            voucher_service.create_voucher(
                VoucherInput(purchase_order_ids=(uuid4(),)), test_actor_id
            )

        assert voucher_service.list_vouchers() == []
        assert voucher_service.next_voucher_number() == "LCV-0001"

    def test_negative_amount(self, voucher_service, two_purchase_orders, test_actor_id):
        with pytest.raises(ValidationError) as exc_info:
            voucher_service.create_voucher(
                VoucherInput(
                    purchase_order_ids=two_purchase_orders, total_partner_profit_kwd="-1.000"
                ),
                test_actor_id,
            )
        assert exc_info.value.field == "total_partner_profit_kwd"

    def test_float_amount(self, voucher_service, two_purchase_orders, test_actor_id):
        with pytest.raises(ValidationError) as exc_info:
            voucher_service.create_voucher(
                VoucherInput(purchase_order_ids=two_purchase_orders, packing_charges_kwd=1.5),
                test_actor_id,
            )
        assert exc_info.value.field == "packing_charges_kwd"

    def test_freight_requires_party(self, voucher_service, two_purchase_orders, test_actor_id):
        with pytest.raises(ValidationError) as exc_info:
            voucher_service.create_voucher(
                VoucherInput(purchase_order_ids=two_purchase_orders, hk_to_dxb="10.000"),
                test_actor_id,
            )
        assert exc_info.value.field == "freight_party_id"

    def test_unknown_party(self, voucher_service, two_purchase_orders, test_actor_id):
        with pytest.raises(ValidationError) as exc_info:
            voucher_service.create_voucher(
                VoucherInput(
                    purchase_order_ids=two_purchase_orders,
                    total_partner_profit_kwd="5",
                    partner_party_id=uuid4(),
                ),
                test_actor_id,
            )
        assert exc_info.value.field == "partner_party_id"

    def test_ineligible_party_type(
        self, voucher_service, two_purchase_orders, packer, test_actor_id
    ):
        with pytest.raises(ValidationError) as exc_info:
            voucher_service.create_voucher(
                VoucherInput(
                    purchase_order_ids=two_purchase_orders,
                    hk_to_dxb="10.000",
                    freight_party_id=packer.id,
                ),
                test_actor_id,
            )
        assert exc_info.value.field == "freight_party_id"

    def test_supplier_is_eligible_for_every_category(
        self, voucher_service, two_purchase_orders, supplier, test_actor_id
    ):
        voucher = voucher_service.create_voucher(
            VoucherInput(
                purchase_order_ids=two_purchase_orders,
                hk_to_dxb="10.000",
                total_partner_profit_kwd="5.000",
                packing_charges_kwd="2.000",
                freight_party_id=supplier.id,
                partner_party_id=supplier.id,
                packing_party_id=supplier.id,
            ),
            test_actor_id,
        )

        assert voucher.payable_status == PayableStatus.PENDING
        assert voucher.partner_payable_status == PayableStatus.PENDING
        assert voucher.packing_payable_status == PayableStatus.PENDING

    def test_inactive_party(
        self, session, voucher_service, party_service, two_purchase_orders, forwarder,
        test_actor_id,
    ):
        party_service.deactivate_party(forwarder.id)
        session.commit()

        with pytest.raises(ValidationError, match="inactive"):
            voucher_service.create_voucher(
                VoucherInput(
                    purchase_order_ids=two_purchase_orders,
                    hk_to_dxb="10.000",
                    freight_party_id=forwarder.id,
                ),
                test_actor_id,
            )


# =============================================================================
# Default-paid rule
# =============================================================================


class TestInitialPayableStatus:

    def test_no_party_means_paid(self, make_voucher):
        voucher = make_voucher(partner_amount="15.000")

        assert voucher.partner_payable_status == PayableStatus.PAID
        assert voucher.partner_payment_id is None

    def test_zero_amount_means_paid(self, make_voucher, partner):
        voucher = make_voucher(partner_amount="0", partner_party_id=partner.id)

        assert voucher.partner_payable_status == PayableStatus.PAID

    def test_party_and_amount_means_pending(self, make_voucher, forwarder, packer):
        voucher = make_voucher(
            hk_to_dxb="4.000",
            packing_amount="2.000",
            freight_party_id=forwarder.id,
            packing_party_id=packer.id,
        )

        assert voucher.payable_status == PayableStatus.PENDING
        assert voucher.packing_payable_status == PayableStatus.PENDING
        assert voucher.partner_payable_status == PayableStatus.PAID

    def test_freight_starts_pending_without_freight(self, make_voucher, partner):
        voucher = make_voucher(partner_amount="9.000", partner_party_id=partner.id)

        assert voucher.total_freight_kwd == Decimal("0.000")
        assert voucher.freight_party_id is None
        assert voucher.payable_status == PayableStatus.PENDING
        assert voucher.payment_id is None


# =============================================================================
# Update
# =============================================================================


class TestUpdateVoucher:

    def test_recomputes_and_keeps_number(
        self, voucher_service, two_purchase_orders, forwarder, partner, test_actor_id
    ):
        voucher = voucher_service.create_voucher(
            _pooled_input(two_purchase_orders, forwarder, partner), test_actor_id
        )

        updated = voucher_service.update_voucher(
            voucher.id,
            _pooled_input(two_purchase_orders, forwarder, partner, hk_to_dxb="45.000"),
            test_actor_id,
        )

        assert updated.voucher_number == voucher.voucher_number
        assert updated.total_freight_kwd == Decimal("45.000")
        assert updated.line_items[0].freight_per_unit_kwd == Decimal("3.000")
        assert updated.grand_total_kwd == Decimal("60.000")

    def test_can_drop_a_purchase_order(
        self, voucher_service, two_purchase_orders, forwarder, partner, test_actor_id
    ):
        voucher = voucher_service.create_voucher(
            _pooled_input(two_purchase_orders, forwarder, partner), test_actor_id
        )

        updated = voucher_service.update_voucher(
            voucher.id,
            _pooled_input(two_purchase_orders[1:], forwarder, partner),
            test_actor_id,
        )

        assert updated.purchase_order_ids == two_purchase_orders[1:]
        assert updated.total_quantity == 5
        assert updated.line_items[0].freight_per_unit_kwd == Decimal("6.000")

    def test_falls_back_to_persisted_lines(
        self, session, config, deterministic_clock, voucher_service, two_purchase_orders,
        forwarder, partner, test_actor_id, captured_logs,
    ):
        voucher = voucher_service.create_voucher(
            _pooled_input(two_purchase_orders, forwarder, partner), test_actor_id
        )
        blind_service = LandedCostVoucherService(
            session,
            config=config,
            clock=deterministic_clock,
            purchase_orders=MissingPurchaseOrders(),
        )

        updated = blind_service.update_voucher(
            voucher.id,
            _pooled_input(two_purchase_orders, forwarder, partner, hk_to_dxb="15.000"),
            test_actor_id,
        )

        assert updated.total_quantity == 15
        assert [line.item_name for line in updated.line_items] == ["Phone case", "Charger"]
        assert updated.line_items[0].freight_per_unit_kwd == Decimal("1.000")
        fallbacks = [r for r in captured_logs() if r["message"] == "voucher_pool_fallback"]
        assert fallbacks[0]["reason"] == "purchase_order_missing"

    def test_paid_category_stays_paid(
        self, voucher_service, two_purchase_orders, forwarder, partner, test_actor_id,
        captured_logs,
    ):
        voucher = voucher_service.create_voucher(
            _pooled_input(two_purchase_orders, forwarder, partner), test_actor_id
        )
        paid = voucher_service.pay_category(
            voucher.id, PayableCategory.FREIGHT, PaymentDetails(), test_actor_id
        )

        updated = voucher_service.update_voucher(
            voucher.id,
            _pooled_input(two_purchase_orders, forwarder, partner, hk_to_dxb="40.000"),
            test_actor_id,
        )

        assert updated.payable_status == PayableStatus.PAID
        assert updated.payment_id == paid.payment_id
        assert updated.total_freight_kwd == Decimal("40.000")
        assert updated.partner_payable_status == PayableStatus.PENDING
        changed = [
            r for r in captured_logs() if r["message"] == "voucher_paid_category_amount_changed"
        ]
        assert len(changed) == 1
        assert changed[0]["category"] == "freight"
        assert changed[0]["old_amount_kwd"] == "30.000"
        assert changed[0]["new_amount_kwd"] == "40.000"

    def test_unchanged_paid_amount_logs_nothing(
        self, voucher_service, two_purchase_orders, forwarder, partner, test_actor_id,
        captured_logs,
    ):
        voucher = voucher_service.create_voucher(
            _pooled_input(two_purchase_orders, forwarder, partner), test_actor_id
        )
        voucher_service.pay_category(
            voucher.id, PayableCategory.FREIGHT, PaymentDetails(), test_actor_id
        )

        voucher_service.update_voucher(
            voucher.id,
            _pooled_input(two_purchase_orders, forwarder, partner, notes="re-checked"),
            test_actor_id,
        )

        assert not any(
            r["message"] == "voucher_paid_category_amount_changed" for r in captured_logs()
        )

    def test_paid_category_cannot_change_party(
        self, voucher_service, two_purchase_orders, forwarder, partner, create_party,
        test_actor_id,
    ):
        other_forwarder = create_party(PartyType.LOGISTIC, name="Gulf Cargo")
        voucher = voucher_service.create_voucher(
            _pooled_input(two_purchase_orders, forwarder, partner), test_actor_id
        )
        paid = voucher_service.pay_category(
            voucher.id, PayableCategory.FREIGHT, PaymentDetails(), test_actor_id
        )

        with pytest.raises(ConflictError, match="freight is already paid to another party"):
            voucher_service.update_voucher(
                voucher.id,
                _pooled_input(
                    two_purchase_orders, forwarder, partner, freight_party_id=other_forwarder.id
                ),
                test_actor_id,
            )

        reloaded = voucher_service.get_voucher(voucher.id)
        assert reloaded == paid
        assert reloaded.freight_party_id == forwarder.id

    def test_removing_party_marks_category_paid(
        self, voucher_service, two_purchase_orders, forwarder, partner, test_actor_id
    ):
        voucher = voucher_service.create_voucher(
            _pooled_input(two_purchase_orders, forwarder, partner), test_actor_id
        )

        updated = voucher_service.update_voucher(
            voucher.id,
            _pooled_input(two_purchase_orders, forwarder, partner, partner_party_id=None),
            test_actor_id,
        )

        assert updated.partner_payable_status == PayableStatus.PAID
        assert updated.partner_payment_id is None

    def test_failed_update_leaves_voucher_untouched(
        self, voucher_service, two_purchase_orders, forwarder, partner, test_actor_id
    ):
        voucher = voucher_service.create_voucher(
            _pooled_input(two_purchase_orders, forwarder, partner), test_actor_id
        )

        with pytest.raises(ValidationError):
            voucher_service.update_voucher(
                voucher.id,
                _pooled_input(two_purchase_orders, forwarder, partner, hk_to_dxb="-1"),
                test_actor_id,
            )

        assert voucher_service.get_voucher(voucher.id) == voucher

    def test_unknown_voucher(self, voucher_service, two_purchase_orders, test_actor_id):
        with pytest.raises(VoucherNotFoundError):
            voucher_service.update_voucher(
                uuid4(), VoucherInput(purchase_order_ids=two_purchase_orders), test_actor_id
            )


# =============================================================================
# Delete
# =============================================================================


class TestDeleteVoucher:

    def test_delete_unpaid(self, voucher_service, make_voucher, test_actor_id, captured_logs):
        voucher = make_voucher()

        voucher_service.delete_voucher(voucher.id, test_actor_id)

        with pytest.raises(VoucherNotFoundError):
            voucher_service.get_voucher(voucher.id)
        assert any(r["message"] == "voucher_deleted" for r in captured_logs())

    def test_delete_paid_conflicts(
        self, voucher_service, make_voucher, partner, test_actor_id
    ):
        voucher = make_voucher(partner_amount="9.000", partner_party_id=partner.id)
        voucher_service.pay_category(
            voucher.id, PayableCategory.PARTNER, PaymentDetails(), test_actor_id
        )

        with pytest.raises(ConflictError):
            voucher_service.delete_voucher(voucher.id, test_actor_id)

        assert voucher_service.get_voucher(voucher.id).voucher_number == voucher.voucher_number

    def test_delete_removes_voucher_from_pending_settlement(
        self, voucher_service, settlement_service, partner, partner_vouchers, test_actor_id
    ):
        settlement = settlement_service.create_settlement(
            SettlementPartyType.PARTNER,
            partner.id,
            [v.id for v in partner_vouchers],
            "2025-03",
            test_actor_id,
        )

        voucher_service.delete_voucher(partner_vouchers[1].id, test_actor_id)

        reloaded = settlement_service.get_settlement(settlement.id)
        assert reloaded.voucher_ids == (partner_vouchers[0].id, partner_vouchers[2].id)
        assert reloaded.total_amount_kwd == Decimal("15.000")

    def test_delete_last_voucher_deletes_pending_settlement(
        self, voucher_service, settlement_service, make_voucher, partner, test_actor_id
    ):
        voucher = make_voucher(partner_amount="4.000", partner_party_id=partner.id)
        settlement = settlement_service.create_settlement(
            SettlementPartyType.PARTNER, partner.id, [voucher.id], "2025-03", test_actor_id
        )

        voucher_service.delete_voucher(voucher.id, test_actor_id)

        assert settlement_service.list_settlements() == []
        with pytest.raises(SettlementNotFoundError):
            settlement_service.get_settlement(settlement.id)

    def test_delete_unknown(self, voucher_service, test_actor_id):
        with pytest.raises(VoucherNotFoundError):
            voucher_service.delete_voucher(uuid4(), test_actor_id)


# =============================================================================
# Reads
# =============================================================================


class TestVoucherQueries:

    def test_list_filters_by_category_status_and_party(
        self, voucher_service, make_voucher, forwarder, partner, test_actor_id
    ):
        freight_only = make_voucher(hk_to_dxb="6.000", freight_party_id=forwarder.id)
        partner_only = make_voucher(partner_amount="3.000", partner_party_id=partner.id)
        voucher_service.pay_category(
            freight_only.id, PayableCategory.FREIGHT, PaymentDetails(), test_actor_id
        )

        all_numbers = [v.voucher_number for v in voucher_service.list_vouchers()]
        assert all_numbers == [freight_only.voucher_number, partner_only.voucher_number]

        pending_partner = voucher_service.list_vouchers(
            category=PayableCategory.PARTNER, status=PayableStatus.PENDING
        )
        assert [v.id for v in pending_partner] == [partner_only.id]

        by_forwarder = voucher_service.list_vouchers(party_id=forwarder.id)
        assert [v.id for v in by_forwarder] == [freight_only.id]

        paid_freight = voucher_service.list_vouchers(
            category=PayableCategory.FREIGHT, status=PayableStatus.PAID, party_id=forwarder.id
        )
        assert [v.id for v in paid_freight] == [freight_only.id]

    def test_pending_payables(self, voucher_service, make_voucher, partner, create_party):
        other = create_party(PartyType.PARTNER, name="Other Partner")
        owed = make_voucher(partner_amount="3.500", partner_party_id=partner.id)
        make_voucher(partner_amount="0", partner_party_id=partner.id)
        make_voucher(partner_amount="2.000", partner_party_id=other.id)

        payables = voucher_service.pending_payables(PayableCategory.PARTNER, party_id=partner.id)

        assert [p.voucher_id for p in payables] == [owed.id]
        assert payables[0].amount_kwd == Decimal("3.500")
        assert payables[0].is_owed
        assert len(voucher_service.pending_payables(PayableCategory.PARTNER)) == 2

    def test_default_parties(self, session, deterministic_clock, forwarder, packer):
        service = LandedCostVoucherService(
            session,
            config=LandedCostConfig(
                default_parties={"freight": forwarder.id, "packing": packer.id}
            ),
            clock=deterministic_clock,
        )

        assert service.default_parties() == {
            PayableCategory.FREIGHT: forwarder.id,
            PayableCategory.PACKING: packer.id,
        }

    def test_get_unknown(self, voucher_service):
        with pytest.raises(VoucherNotFoundError):
            voucher_service.get_voucher(uuid4())
