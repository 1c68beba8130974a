"""
Landed Cost Voucher Service (``landed_modules.landed_cost.service``).

Responsibility
--------------
Creates, updates, deletes and pays landed cost vouchers.  Pools line items
from one or more purchase orders, runs the quantity-weighted
``AllocationCalculator`` and persists the voucher with its allocated lines
and purchase order links.

Architecture position
---------------------
**Modules layer** -- ``LandedCostVoucherService`` is the sole public entry
point for voucher operations.  It composes the pure allocation engine with
the kernel directories (purchase orders, parties, numbering, payments),
each of which may be swapped for any object satisfying the matching
protocol in ``landed_kernel.domain.directories``.

Invariants enforced
-------------------
* Each public write method owns the transaction boundary (``commit`` on
  success, ``rollback`` and re-raise on any exception).
* A voucher covers at least one purchase order, each at most once.
* ``total_freight_kwd`` is the sum of both legs after FX conversion, and
  ``grand_total_kwd`` is freight + partner profit + packing.
* Freight is born ``pending``.  A partner or packing payable with no party
  or a zero amount is born ``paid``.
* Freight above zero requires a freight party.
* A category that carries a payment id is never reset to ``pending`` and
  keeps the party it was paid to.

Failure modes
-------------
* ``ValidationError``  -- bad input: no PO, negative or float amounts,
  missing FX rate, unknown/inactive/ineligible party.
* ``PurchaseOrderNotFoundError`` -- a PO on create cannot be read.
* ``VoucherNotFoundError`` -- unknown voucher id.
* ``ConflictError`` -- deleting a paid or settled voucher, or moving a
  paid category to another party.
* ``InvalidStateError`` -- paying a category that is not payable.

Usage::

    service = LandedCostVoucherService(session, clock=clock)
    voucher = service.create_voucher(
        VoucherInput(
            purchase_order_ids=(po_a, po_b),
            hk_to_dxb=Decimal("20.000"),
            dxb_to_kwi=Decimal("10.000"),
            total_partner_profit_kwd=Decimal("15.000"),
            packing_charges_kwd=Decimal("0"),
            freight_party_id=forwarder_id,
        ),
        actor_id=actor_id,
    )
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from landed_config import get_active_config
from landed_config.schema import LandedCostConfig
from landed_engines.allocation import (
    AllocationCalculator,
    AllocationResult,
    LineItemInput,
    packing_charge_for,
)
from landed_kernel.db.types import ZERO, format_money, parse_money, round_money
from landed_kernel.domain.clock import Clock, SystemClock
from landed_kernel.domain.directories import (
    PartyDirectory,
    PaymentSink,
    PurchaseOrderDirectory,
    VoucherNumbering,
)
from landed_kernel.domain.values import BASE_CURRENCY, Currency, ExchangeRate, Money
from landed_kernel.exceptions import (
    ConflictError,
    PartyNotFoundError,
    PurchaseOrderNotFoundError,
    ValidationError,
    VoucherNotFoundError,
)
from landed_kernel.logging_config import LogContext, get_logger
from landed_kernel.services.party_service import PartyService
from landed_kernel.services.payment_service import PaymentService
from landed_kernel.services.purchase_order_service import PurchaseOrderService
from landed_kernel.services.sequence_service import DocumentNumbering
from landed_modules.landed_cost.models import (
    FreightLeg,
    FreightLegInput,
    Payable,
    PayableCategory,
    PayableStatus,
    PaymentDetails,
    SettlementStatus,
    Voucher,
    VoucherInput,
)
from landed_modules.landed_cost.orm import (
    LandedCostLineItemModel,
    LandedCostVoucherModel,
    PartySettlementModel,
    SettlementVoucherModel,
    VoucherPurchaseOrderModel,
)
from landed_modules.landed_cost.payables import (
    PAYABLE_COLUMNS,
    PayableStateMachine,
    initial_status,
    owed_payables_query,
)

logger = get_logger("modules.landed_cost.service")


@dataclass(frozen=True)
class _PreparedVoucher:
    """Validated and allocated voucher content, ready to be written."""

    purchase_order_ids: tuple[UUID, ...]
    hk_to_dxb: FreightLeg
    dxb_to_kwi: FreightLeg
    total_freight_kwd: Decimal
    total_partner_profit_kwd: Decimal
    packing_charges_kwd: Decimal
    parties: dict[PayableCategory, UUID | None]
    allocation: AllocationResult

    @property
    def grand_total_kwd(self) -> Decimal:
        return self.total_freight_kwd + self.total_partner_profit_kwd + self.packing_charges_kwd

    def amount_for(self, category: PayableCategory) -> Decimal:
        match PayableCategory(category):
            case PayableCategory.FREIGHT:
                return self.total_freight_kwd
            case PayableCategory.PARTNER:
                return self.total_partner_profit_kwd
            case PayableCategory.PACKING:
                return self.packing_charges_kwd


class LandedCostVoucherService:
    """
    Orchestrates landed cost vouchers through the allocation engine and
    the kernel directories.

    Contract
    --------
    * Write methods return the resulting ``Voucher`` snapshot, built before
      commit.
    * Read methods never write.

    Guarantees
    ----------
    * Session is committed only when the whole operation succeeded.
    * ``pay_category`` records the payment and flips the status inside one
      savepoint; neither survives alone.
    * Clock and every collaborator are injectable for deterministic tests.

    Non-goals
    ---------
    * Does NOT manage purchase orders or parties; it only reads them.
    * Does NOT post to a general ledger.
    """

    def __init__(
        self,
        session: Session,
        config: LandedCostConfig | None = None,
        clock: Clock | None = None,
        purchase_orders: PurchaseOrderDirectory | None = None,
        parties: PartyDirectory | None = None,
        numbering: VoucherNumbering | None = None,
        payments: PaymentSink | None = None,
        calculator: AllocationCalculator | None = None,
    ):
        self._session = session
        self._config = config or get_active_config()
        self._clock = clock or SystemClock()
        self._purchase_orders = purchase_orders or PurchaseOrderService(session)
        self._parties = parties or PartyService(session)
        self._numbering = numbering or DocumentNumbering(
            session,
            voucher_prefix=self._config.voucher_prefix,
            voucher_width=self._config.voucher_number_width,
            settlement_prefix=self._config.settlement_prefix,
            settlement_width=self._config.settlement_number_width,
        )
        self._payments = payments or PaymentService(session)
        self._calculator = calculator or AllocationCalculator()
        self._payables = PayableStateMachine(session, self._payments, self._clock)

    # =========================================================================
    # Validation and preparation
    # =========================================================================

    @staticmethod
    def _parse_charge(
        value: Decimal | str | int | None,
        field: str,
        default: Decimal | None = ZERO,
    ) -> Decimal | None:
        try:
            amount = parse_money(value, default=default)
        except ValueError as exc:
            raise ValidationError(str(exc), field=field) from exc
        if amount is None:
            return None
        if amount < ZERO:
            raise ValidationError(f"{field} cannot be negative: {amount}", field=field)
        return round_money(amount)

    def _resolve_leg(
        self,
        leg: FreightLegInput | Decimal | str | int | None,
        field: str,
    ) -> FreightLeg:
        """Convert one freight leg to KWD using the rate entered with it."""
        if not isinstance(leg, FreightLegInput):
            amount = self._parse_charge(leg, field)
            return FreightLeg(
                amount=amount, currency=BASE_CURRENCY, fx_rate=Decimal("1"), amount_kwd=amount
            )

        amount = self._parse_charge(leg.amount, field)
        try:
            currency = Currency(leg.currency)
        except ValueError as exc:
            raise ValidationError(str(exc), field=f"{field}.currency") from exc

        if currency.code == BASE_CURRENCY:
            return FreightLeg(
                amount=amount, currency=BASE_CURRENCY, fx_rate=Decimal("1"), amount_kwd=amount
            )

        if leg.fx_rate is None:
            raise ValidationError(
                f"An exchange rate is required for a {currency.code} freight leg",
                field=f"{field}.fx_rate",
            )
        try:
            rate = ExchangeRate.to_base(currency, leg.fx_rate)
            amount_kwd = rate.convert(Money.of(amount, currency)).amount
        except ValueError as exc:
            raise ValidationError(str(exc), field=f"{field}.fx_rate") from exc

        return FreightLeg(
            amount=amount, currency=currency.code, fx_rate=rate.rate, amount_kwd=amount_kwd
        )

    def _check_party(self, category: PayableCategory, party_id: UUID | None) -> None:
        if party_id is None:
            return
        field = f"{category.value}_party_id"
        try:
            party = self._parties.get_party(party_id)
        except PartyNotFoundError as exc:
            raise ValidationError(
                f"Unknown {category.value} party: {party_id}", field=field
            ) from exc
        if not party.is_active:
            raise ValidationError(
                f"{category.value} party {party.party_code} is inactive", field=field
            )
        eligible = self._config.eligible_types_for(category.value)
        if party.party_type not in eligible:
            raise ValidationError(
                f"{category.value} party {party.party_code} has type "
                f"{party.party_type!r}; expected one of {list(eligible)}",
                field=field,
            )

    def _pool_line_items(
        self,
        purchase_order_ids: Sequence[UUID],
        fallback: Sequence[LineItemInput] = (),
    ) -> list[LineItemInput]:
        """
        Gather line items from every purchase order, in PO order.

        When ``fallback`` lines are given (an update) and the purchase
        orders cannot be read or yield nothing, the fallback is used.
        """
        items: list[LineItemInput] = []
        try:
            for po_id in purchase_order_ids:
                for line in self._purchase_orders.list_line_items(po_id):
                    items.append(
                        LineItemInput(
                            item_name=line.item_name,
                            quantity=line.quantity,
                            unit_price_kwd=line.unit_price_kwd,
                            item_category=line.item_category,
                            source_line_item_id=line.id,
                            purchase_order_id=line.purchase_order_id,
                        )
                    )
        except PurchaseOrderNotFoundError:
            if not fallback:
                raise
            logger.warning(
                "voucher_pool_fallback",
                extra={"reason": "purchase_order_missing", "line_count": len(fallback)},
            )
            return list(fallback)

        if not items and fallback:
            logger.warning(
                "voucher_pool_fallback",
                extra={"reason": "no_line_items", "line_count": len(fallback)},
            )
            return list(fallback)
        return items

    def _prepare(
        self,
        data: VoucherInput,
        fallback: Sequence[LineItemInput] = (),
    ) -> _PreparedVoucher:
        po_ids = tuple(data.purchase_order_ids or ())
        if not po_ids:
            raise ValidationError("No purchase order selected", field="purchase_order_ids")
        if len(set(po_ids)) != len(po_ids):
            raise ValidationError(
                "A purchase order may appear only once per voucher",
                field="purchase_order_ids",
            )

        hk_to_dxb = self._resolve_leg(data.hk_to_dxb, "hk_to_dxb")
        dxb_to_kwi = self._resolve_leg(data.dxb_to_kwi, "dxb_to_kwi")
        total_freight = hk_to_dxb.amount_kwd + dxb_to_kwi.amount_kwd
        partner_total = self._parse_charge(
            data.total_partner_profit_kwd, "total_partner_profit_kwd"
        )
        packing_input = self._parse_charge(
            data.packing_charges_kwd, "packing_charges_kwd", default=None
        )

        parties = {category: data.party_for(category) for category in PayableCategory}
        for category, party_id in parties.items():
            self._check_party(category, party_id)
        if total_freight > ZERO and parties[PayableCategory.FREIGHT] is None:
            raise ValidationError(
                "A freight party is required when freight is charged",
                field="freight_party_id",
            )

        items = self._pool_line_items(po_ids, fallback)
        total_quantity = sum(item.quantity for item in items)
        if packing_input is None:
            packing_total = packing_charge_for(total_quantity, self._config.packing_rate_per_unit)
        else:
            packing_total = packing_input

        allocation = self._calculator.allocate(
            items,
            freight_total=total_freight,
            partner_total=partner_total,
            packing_total=packing_total,
        )

        return _PreparedVoucher(
            purchase_order_ids=po_ids,
            hk_to_dxb=hk_to_dxb,
            dxb_to_kwi=dxb_to_kwi,
            total_freight_kwd=total_freight,
            total_partner_profit_kwd=partner_total,
            packing_charges_kwd=packing_total,
            parties=parties,
            allocation=allocation,
        )

    # =========================================================================
    # Persistence helpers
    # =========================================================================

    def _load_for_update(self, voucher_id: UUID) -> LandedCostVoucherModel:
        stmt = (
            select(LandedCostVoucherModel)
            .where(LandedCostVoucherModel.id == voucher_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        model = self._session.execute(stmt).scalar_one_or_none()
        if model is None:
            raise VoucherNotFoundError(str(voucher_id))
        return model

    def _apply(
        self,
        model: LandedCostVoucherModel,
        prepared: _PreparedVoucher,
        actor_id: UUID,
    ) -> None:
        paid_amounts: dict[PayableCategory, Decimal] = {}
        for category in PayableCategory:
            cols = PAYABLE_COLUMNS[category]
            if getattr(model, cols.payment_id, None) is None:
                continue
            if getattr(model, cols.party_id) != prepared.parties[category]:
                raise ConflictError(
                    "voucher",
                    model.voucher_number,
                    f"{category.value} is already paid to another party",
                )
            paid_amounts[category] = getattr(model, cols.amount)

        model.hk_to_dxb_amount = prepared.hk_to_dxb.amount
        model.hk_to_dxb_currency = prepared.hk_to_dxb.currency
        model.hk_to_dxb_fx_rate = prepared.hk_to_dxb.fx_rate
        model.hk_to_dxb_kwd = prepared.hk_to_dxb.amount_kwd
        model.dxb_to_kwi_amount = prepared.dxb_to_kwi.amount
        model.dxb_to_kwi_currency = prepared.dxb_to_kwi.currency
        model.dxb_to_kwi_fx_rate = prepared.dxb_to_kwi.fx_rate
        model.dxb_to_kwi_kwd = prepared.dxb_to_kwi.amount_kwd
        model.total_freight_kwd = prepared.total_freight_kwd
        model.total_partner_profit_kwd = prepared.total_partner_profit_kwd
        model.packing_charges_kwd = prepared.packing_charges_kwd
        model.grand_total_kwd = prepared.grand_total_kwd

        for category in PayableCategory:
            cols = PAYABLE_COLUMNS[category]
            party_id = prepared.parties[category]
            amount = prepared.amount_for(category)
            if category in paid_amounts:
                if paid_amounts[category] != amount:
                    logger.warning(
                        "voucher_paid_category_amount_changed",
                        extra={
                            "category": category.value,
                            "old_amount_kwd": format_money(paid_amounts[category]),
                            "new_amount_kwd": format_money(amount),
                        },
                    )
                continue
            setattr(model, cols.party_id, party_id)
            setattr(model, cols.status, initial_status(category, party_id, amount).value)

        model.lines = [
            LandedCostLineItemModel.from_allocation(line, index, actor_id)
            for index, line in enumerate(prepared.allocation.lines)
        ]

        existing = {link.purchase_order_id: link for link in model.purchase_order_links}
        links = []
        for index, po_id in enumerate(prepared.purchase_order_ids):
            link = existing.get(po_id)
            if link is None:
                link = VoucherPurchaseOrderModel(purchase_order_id=po_id, created_by_id=actor_id)
            link.sort_order = index
            links.append(link)
        model.purchase_order_links = links

    # =========================================================================
    # Writes
    # =========================================================================

    def create_voucher(self, data: VoucherInput, actor_id: UUID) -> Voucher:
        """
        Create a voucher over one or more purchase orders.

        Postconditions:
            - Voucher, lines and PO links committed together.
            - One voucher number consumed.
        Raises:
            ValidationError, PurchaseOrderNotFoundError.
        """
        with LogContext.bind(actor_id=str(actor_id)):
            logger.info(
                "voucher_create_started",
                extra={"purchase_order_count": len(data.purchase_order_ids or ())},
            )
            try:
                prepared = self._prepare(data)
                model = LandedCostVoucherModel(
                    voucher_number=self._numbering.next_voucher_number(),
                    voucher_date=data.voucher_date or self._clock.today(),
                    notes=data.notes,
                    created_by_id=actor_id,
                )
                self._apply(model, prepared, actor_id)
                self._session.add(model)
                self._session.flush()
                voucher = model.to_dto()
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "voucher_created",
                extra={
                    "voucher_id": str(voucher.id),
                    "voucher_number": voucher.voucher_number,
                    "total_quantity": voucher.total_quantity,
                    "grand_total_kwd": format_money(voucher.grand_total_kwd),
                },
            )
            return voucher

    def update_voucher(self, voucher_id: UUID, data: VoucherInput, actor_id: UUID) -> Voucher:
        """
        Recompute a voucher from new input.  The voucher number is kept.

        Line items are re-pooled from the purchase orders; when those can
        no longer be read the voucher's own persisted lines are re-allocated.
        A category that is already paid keeps its status and payment; its
        party cannot change.

        Raises:
            ConflictError: A paid category would move to another party.
        """
        with LogContext.bind(actor_id=str(actor_id), voucher_id=str(voucher_id)):
            try:
                model = self._load_for_update(voucher_id)
                fallback = [
                    LineItemInput(
                        item_name=line.item_name,
                        quantity=line.quantity,
                        unit_price_kwd=line.unit_price_kwd,
                        item_category=line.item_category,
                        source_line_item_id=line.source_line_item_id,
                        purchase_order_id=line.purchase_order_id,
                    )
                    for line in model.lines
                ]
                prepared = self._prepare(data, fallback=fallback)
                self._apply(model, prepared, actor_id)
                if data.voucher_date is not None:
                    model.voucher_date = data.voucher_date
                model.notes = data.notes
                model.updated_by_id = actor_id
                self._session.flush()
                voucher = model.to_dto()
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "voucher_updated",
                extra={
                    "voucher_number": voucher.voucher_number,
                    "grand_total_kwd": format_money(voucher.grand_total_kwd),
                },
            )
            return voucher

    def delete_voucher(self, voucher_id: UUID, actor_id: UUID) -> None:
        """
        Delete a voucher nobody has paid.

        The voucher is dropped from any pending settlement, whose total is
        recomputed; a pending settlement left empty is deleted.

        Raises:
            ConflictError: A category carries a payment, or the voucher is
                part of a finalized settlement.
        """
        with LogContext.bind(actor_id=str(actor_id), voucher_id=str(voucher_id)):
            try:
                model = self._load_for_update(voucher_id)
                for category in PayableCategory:
                    if getattr(model, PAYABLE_COLUMNS[category].payment_id) is not None:
                        raise ConflictError(
                            "voucher", model.voucher_number, f"{category.value} is already paid"
                        )

                stmt = select(SettlementVoucherModel).where(
                    SettlementVoucherModel.voucher_id == model.id
                )
                settlement_lines = list(self._session.execute(stmt).scalars())
                for line in settlement_lines:
                    if line.settlement.status == SettlementStatus.FINALIZED.value:
                        raise ConflictError(
                            "voucher",
                            model.voucher_number,
                            f"included in finalized settlement {line.settlement.settlement_number}",
                        )

                for line in settlement_lines:
                    self._detach_from_settlement(line.settlement, line, actor_id)

                voucher_number = model.voucher_number
                self._session.delete(model)
                self._session.flush()
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info("voucher_deleted", extra={"voucher_number": voucher_number})

    def _detach_from_settlement(
        self,
        settlement: PartySettlementModel,
        line: SettlementVoucherModel,
        actor_id: UUID,
    ) -> None:
        settlement.lines.remove(line)
        if not settlement.lines:
            logger.info(
                "settlement_emptied_and_deleted",
                extra={"settlement_number": settlement.settlement_number},
            )
            self._session.delete(settlement)
            return
        settlement.total_amount_kwd = sum(
            (remaining.amount_kwd for remaining in settlement.lines), ZERO
        )
        settlement.updated_by_id = actor_id
        logger.info(
            "settlement_voucher_removed",
            extra={
                "settlement_number": settlement.settlement_number,
                "voucher_number": line.voucher_number,
                "total_amount_kwd": format_money(settlement.total_amount_kwd),
            },
        )

    def pay_category(
        self,
        voucher_id: UUID,
        category: PayableCategory,
        details: PaymentDetails,
        actor_id: UUID,
    ) -> Voucher:
        """
        Pay one category of one voucher in full.

        Raises:
            InvalidStateError: Already paid, no party, zero amount, or a
                concurrent payer won the race.
        """
        category = PayableCategory(category)
        with LogContext.bind(actor_id=str(actor_id), voucher_id=str(voucher_id)):
            try:
                model = self._load_for_update(voucher_id)
                with self._session.begin_nested():
                    payment_id = self._payables.pay(model, category, details, actor_id)
                voucher = model.to_dto()
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "voucher_category_paid",
                extra={
                    "voucher_number": voucher.voucher_number,
                    "category": category.value,
                    "payment_id": str(payment_id),
                },
            )
            return voucher

    # =========================================================================
    # Reads
    # =========================================================================

    def get_voucher(self, voucher_id: UUID) -> Voucher:
        model = self._session.get(LandedCostVoucherModel, voucher_id)
        if model is None:
            raise VoucherNotFoundError(str(voucher_id))
        return model.to_dto()

    def list_vouchers(
        self,
        category: PayableCategory | None = None,
        status: PayableStatus | None = None,
        party_id: UUID | None = None,
    ) -> list[Voucher]:
        """
        Vouchers in number order.

        With a category, ``status`` and ``party_id`` filter that category's
        payable; without one they match any category.
        """
        stmt = select(LandedCostVoucherModel)
        categories = [PayableCategory(category)] if category is not None else list(PayableCategory)
        if status is not None:
            stmt = stmt.where(
                or_(
                    *(
                        getattr(LandedCostVoucherModel, PAYABLE_COLUMNS[c].status)
                        == PayableStatus(status).value
                        for c in categories
                    )
                )
            )
        if party_id is not None:
            stmt = stmt.where(
                or_(
                    *(
                        getattr(LandedCostVoucherModel, PAYABLE_COLUMNS[c].party_id) == party_id
                        for c in categories
                    )
                )
            )
        stmt = stmt.order_by(LandedCostVoucherModel.voucher_number)
        return [model.to_dto() for model in self._session.execute(stmt).scalars()]

    def pending_payables(
        self,
        category: PayableCategory,
        party_id: UUID | None = None,
    ) -> list[Payable]:
        """Payables of one category that are still owed."""
        category = PayableCategory(category)
        stmt = owed_payables_query(category, party_id)
        return [
            model.to_dto().payable(category)
            for model in self._session.execute(stmt).scalars()
        ]

    def default_parties(self) -> dict[PayableCategory, UUID]:
        """Configured payee per category, for pre-filling a new voucher."""
        return {
            category: party_id
            for category in PayableCategory
            if (party_id := self._config.default_party_for(category.value)) is not None
        }

    def next_voucher_number(self) -> str:
        """The number the next voucher would receive.  Consumes nothing."""
        return self._numbering.peek_voucher_number()
