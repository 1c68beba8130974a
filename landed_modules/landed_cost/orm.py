"""
Landed Cost ORM Models (``landed_modules.landed_cost.orm``).

Responsibility
--------------
SQLAlchemy persistence models for the landed-cost module.  Maps the frozen
dataclasses in ``models.py`` to database tables.

Architecture position
---------------------
**Modules layer** -- persistence.  Imports from ``landed_kernel.db.base``
and sibling ``models.py``.  MUST NOT be imported by ``landed_kernel``.

Invariants enforced
-------------------
* Payable statuses are constrained to pending/paid, settlement status to
  pending/finalized.
* Charge amounts are non-negative.
* A voucher links each purchase order at most once.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from landed_kernel.db.base import TrackedBase

_PAYABLE_STATUSES = "('pending', 'paid')"


# ---------------------------------------------------------------------------
# 1. LandedCostVoucherModel
# ---------------------------------------------------------------------------


class LandedCostVoucherModel(TrackedBase):
    """
    ORM model for landed cost vouchers.

    Maps to the ``Voucher`` frozen dataclass.  Line items and PO links live
    in child tables and are deleted with the voucher.

    Guarantees:
        - voucher_number is unique (uq_lcv_voucher_number).
        - Each category carries its own party, status and payment id.
    """

    __tablename__ = "landed_cost_vouchers"

    __table_args__ = (
        UniqueConstraint("voucher_number", name="uq_lcv_voucher_number"),
        Index("idx_lcv_date", "voucher_date"),
        Index("idx_lcv_freight_party", "freight_party_id"),
        Index("idx_lcv_partner_party", "partner_party_id"),
        Index("idx_lcv_packing_party", "packing_party_id"),
        CheckConstraint(f"payable_status IN {_PAYABLE_STATUSES}", name="ck_lcv_payable_status"),
        CheckConstraint(
            f"partner_payable_status IN {_PAYABLE_STATUSES}", name="ck_lcv_partner_status"
        ),
        CheckConstraint(
            f"packing_payable_status IN {_PAYABLE_STATUSES}", name="ck_lcv_packing_status"
        ),
        CheckConstraint(
            "total_freight_kwd >= 0 AND total_partner_profit_kwd >= 0 "
            "AND packing_charges_kwd >= 0",
            name="ck_lcv_charges_non_negative",
        ),
    )

    voucher_number: Mapped[str] = mapped_column(String(30), nullable=False)
    voucher_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Freight leg 1: Hong Kong to Dubai
    hk_to_dxb_amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    hk_to_dxb_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="KWD")
    hk_to_dxb_fx_rate: Mapped[Decimal] = mapped_column(
        Numeric(18, 6), nullable=False, default=Decimal("1")
    )
    hk_to_dxb_kwd: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    # Freight leg 2: Dubai to Kuwait
    dxb_to_kwi_amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    dxb_to_kwi_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="KWD")
    dxb_to_kwi_fx_rate: Mapped[Decimal] = mapped_column(
        Numeric(18, 6), nullable=False, default=Decimal("1")
    )
    dxb_to_kwi_kwd: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    total_freight_kwd: Mapped[Decimal] = mapped_column(nullable=False)
    total_partner_profit_kwd: Mapped[Decimal] = mapped_column(nullable=False)
    packing_charges_kwd: Mapped[Decimal] = mapped_column(nullable=False)
    grand_total_kwd: Mapped[Decimal] = mapped_column(nullable=False)

    freight_party_id: Mapped[UUID | None] = mapped_column(ForeignKey("parties.id"), nullable=True)
    partner_party_id: Mapped[UUID | None] = mapped_column(ForeignKey("parties.id"), nullable=True)
    packing_party_id: Mapped[UUID | None] = mapped_column(ForeignKey("parties.id"), nullable=True)

    payable_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    partner_payable_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending"
    )
    packing_payable_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending"
    )

    payment_id: Mapped[UUID | None] = mapped_column(ForeignKey("payments.id"), nullable=True)
    partner_payment_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("payments.id"), nullable=True
    )
    packing_payment_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("payments.id"), nullable=True
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    lines: Mapped[list["LandedCostLineItemModel"]] = relationship(
        back_populates="voucher",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="LandedCostLineItemModel.line_number",
    )

    purchase_order_links: Mapped[list["VoucherPurchaseOrderModel"]] = relationship(
        back_populates="voucher",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="VoucherPurchaseOrderModel.sort_order",
    )

    def to_dto(self):
        """Convert ORM model to frozen dataclass."""
        from landed_modules.landed_cost.models import FreightLeg, PayableStatus, Voucher

        return Voucher(
            id=self.id,
            voucher_number=self.voucher_number,
            voucher_date=self.voucher_date,
            purchase_order_ids=tuple(link.purchase_order_id for link in self.purchase_order_links),
            hk_to_dxb=FreightLeg(
                amount=self.hk_to_dxb_amount,
                currency=self.hk_to_dxb_currency,
                fx_rate=self.hk_to_dxb_fx_rate,
                amount_kwd=self.hk_to_dxb_kwd,
            ),
            dxb_to_kwi=FreightLeg(
                amount=self.dxb_to_kwi_amount,
                currency=self.dxb_to_kwi_currency,
                fx_rate=self.dxb_to_kwi_fx_rate,
                amount_kwd=self.dxb_to_kwi_kwd,
            ),
            total_freight_kwd=self.total_freight_kwd,
            total_partner_profit_kwd=self.total_partner_profit_kwd,
            packing_charges_kwd=self.packing_charges_kwd,
            grand_total_kwd=self.grand_total_kwd,
            line_items=tuple(line.to_dto() for line in self.lines),
            freight_party_id=self.freight_party_id,
            partner_party_id=self.partner_party_id,
            packing_party_id=self.packing_party_id,
            payable_status=PayableStatus(self.payable_status),
            partner_payable_status=PayableStatus(self.partner_payable_status),
            packing_payable_status=PayableStatus(self.packing_payable_status),
            payment_id=self.payment_id,
            partner_payment_id=self.partner_payment_id,
            packing_payment_id=self.packing_payment_id,
            notes=self.notes,
        )

    def __repr__(self) -> str:
        return f"<LandedCostVoucherModel {self.voucher_number}>"


# ---------------------------------------------------------------------------
# 2. LandedCostLineItemModel
# ---------------------------------------------------------------------------


class LandedCostLineItemModel(TrackedBase):
    """
    ORM model for allocated voucher lines.

    Keeps the raw unit price and quantity as well as the allocation, so a
    voucher can be recomputed from its own lines when its purchase orders
    are no longer readable.
    """

    __tablename__ = "landed_cost_line_items"

    __table_args__ = (
        Index("idx_lcl_voucher", "voucher_id"),
        Index("idx_lcl_item", "item_name"),
        CheckConstraint("quantity >= 0", name="ck_lcl_quantity"),
    )

    voucher_id: Mapped[UUID] = mapped_column(
        ForeignKey("landed_cost_vouchers.id", ondelete="CASCADE"), nullable=False
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    source_line_item_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("purchase_order_line_items.id", ondelete="SET NULL"), nullable=True
    )
    purchase_order_id: Mapped[UUID | None] = mapped_column(nullable=True)
    item_name: Mapped[str] = mapped_column(String(255), nullable=False)
    item_category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price_kwd: Mapped[Decimal] = mapped_column(nullable=False)
    line_total_kwd: Mapped[Decimal] = mapped_column(nullable=False)
    freight_per_unit_kwd: Mapped[Decimal] = mapped_column(nullable=False)
    partner_profit_per_unit_kwd: Mapped[Decimal] = mapped_column(nullable=False)
    packing_per_unit_kwd: Mapped[Decimal] = mapped_column(nullable=False)
    landed_cost_per_unit_kwd: Mapped[Decimal] = mapped_column(nullable=False)
    total_landed_cost_kwd: Mapped[Decimal] = mapped_column(nullable=False)

    voucher: Mapped["LandedCostVoucherModel"] = relationship(back_populates="lines")

    def to_dto(self):
        """Convert ORM model to frozen dataclass."""
        from landed_modules.landed_cost.models import VoucherLine

        return VoucherLine(
            id=self.id,
            source_line_item_id=self.source_line_item_id,
            purchase_order_id=self.purchase_order_id,
            item_name=self.item_name,
            item_category=self.item_category,
            quantity=self.quantity,
            unit_price_kwd=self.unit_price_kwd,
            line_total_kwd=self.line_total_kwd,
            freight_per_unit_kwd=self.freight_per_unit_kwd,
            partner_profit_per_unit_kwd=self.partner_profit_per_unit_kwd,
            packing_per_unit_kwd=self.packing_per_unit_kwd,
            landed_cost_per_unit_kwd=self.landed_cost_per_unit_kwd,
            total_landed_cost_kwd=self.total_landed_cost_kwd,
        )

    @classmethod
    def from_allocation(cls, line, line_number: int, created_by_id: UUID) -> "LandedCostLineItemModel":
        """Create ORM model from an ``AllocatedLineItem``."""
        return cls(
            line_number=line_number,
            source_line_item_id=line.source_line_item_id,
            purchase_order_id=line.purchase_order_id,
            item_name=line.item_name,
            item_category=line.item_category,
            quantity=line.quantity,
            unit_price_kwd=line.unit_price_kwd,
            line_total_kwd=line.line_total_kwd,
            freight_per_unit_kwd=line.freight_per_unit_kwd,
            partner_profit_per_unit_kwd=line.partner_profit_per_unit_kwd,
            packing_per_unit_kwd=line.packing_per_unit_kwd,
            landed_cost_per_unit_kwd=line.landed_cost_per_unit_kwd,
            total_landed_cost_kwd=line.total_landed_cost_kwd,
            created_by_id=created_by_id,
        )


# ---------------------------------------------------------------------------
# 3. VoucherPurchaseOrderModel
# ---------------------------------------------------------------------------


class VoucherPurchaseOrderModel(TrackedBase):
    """Ordered link between a voucher and the purchase orders it covers."""

    __tablename__ = "landed_cost_voucher_purchase_orders"

    __table_args__ = (
        UniqueConstraint("voucher_id", "purchase_order_id", name="uq_lcvpo_voucher_po"),
        Index("idx_lcvpo_voucher", "voucher_id"),
        Index("idx_lcvpo_po", "purchase_order_id"),
    )

    voucher_id: Mapped[UUID] = mapped_column(
        ForeignKey("landed_cost_vouchers.id", ondelete="CASCADE"), nullable=False
    )
    purchase_order_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchase_orders.id"), nullable=False
    )
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    voucher: Mapped["LandedCostVoucherModel"] = relationship(
        back_populates="purchase_order_links"
    )


# ---------------------------------------------------------------------------
# 4. PartySettlementModel
# ---------------------------------------------------------------------------


class PartySettlementModel(TrackedBase):
    """
    ORM model for batched party settlements.

    Maps to the ``Settlement`` frozen dataclass.  The voucher set and the
    amounts are snapshotted in ``SettlementVoucherModel`` rows at creation.
    """

    __tablename__ = "party_settlements"

    __table_args__ = (
        UniqueConstraint("settlement_number", name="uq_settlement_number"),
        Index("idx_settlement_party", "party_id"),
        Index("idx_settlement_period", "settlement_period"),
        Index("idx_settlement_status", "status"),
        CheckConstraint(
            "status IN ('pending', 'finalized')", name="ck_settlement_status"
        ),
        CheckConstraint(
            "party_type IN ('partner', 'packing', 'logistic')",
            name="ck_settlement_party_type",
        ),
    )

    settlement_number: Mapped[str] = mapped_column(String(30), nullable=False)
    party_type: Mapped[str] = mapped_column(String(20), nullable=False)
    party_id: Mapped[UUID] = mapped_column(ForeignKey("parties.id"), nullable=False)
    settlement_period: Mapped[str] = mapped_column(String(7), nullable=False)
    settlement_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_amount_kwd: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    payment_id: Mapped[UUID | None] = mapped_column(ForeignKey("payments.id"), nullable=True)
    account_ref: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    finalized_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    lines: Mapped[list["SettlementVoucherModel"]] = relationship(
        back_populates="settlement",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="SettlementVoucherModel.sort_order",
    )

    def to_dto(self):
        """Convert ORM model to frozen dataclass."""
        from landed_modules.landed_cost.models import (
            Settlement,
            SettlementPartyType,
            SettlementStatus,
        )

        return Settlement(
            id=self.id,
            settlement_number=self.settlement_number,
            party_type=SettlementPartyType(self.party_type),
            party_id=self.party_id,
            settlement_period=self.settlement_period,
            settlement_date=self.settlement_date,
            total_amount_kwd=self.total_amount_kwd,
            lines=tuple(line.to_dto() for line in self.lines),
            status=SettlementStatus(self.status),
            payment_id=self.payment_id,
            account_ref=self.account_ref,
            notes=self.notes,
            finalized_at=self.finalized_at,
        )

    def __repr__(self) -> str:
        return f"<PartySettlementModel {self.settlement_number} ({self.status})>"


# ---------------------------------------------------------------------------
# 5. SettlementVoucherModel
# ---------------------------------------------------------------------------


class SettlementVoucherModel(TrackedBase):
    """
    One voucher's snapshotted amount within a settlement.

    ``applied`` is NULL until finalize, then True when the voucher's
    payable was flipped and False when it was skipped.
    """

    __tablename__ = "party_settlement_vouchers"

    __table_args__ = (
        UniqueConstraint("settlement_id", "voucher_id", name="uq_settlement_voucher"),
        Index("idx_settlement_voucher_voucher", "voucher_id"),
    )

    settlement_id: Mapped[UUID] = mapped_column(
        ForeignKey("party_settlements.id", ondelete="CASCADE"), nullable=False
    )
    voucher_id: Mapped[UUID] = mapped_column(nullable=False)
    voucher_number: Mapped[str] = mapped_column(String(30), nullable=False)
    amount_kwd: Mapped[Decimal] = mapped_column(nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    applied: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    settlement: Mapped["PartySettlementModel"] = relationship(back_populates="lines")

    def to_dto(self):
        """Convert ORM model to frozen dataclass."""
        from landed_modules.landed_cost.models import SettlementLine

        return SettlementLine(
            voucher_id=self.voucher_id,
            voucher_number=self.voucher_number,
            amount_kwd=self.amount_kwd,
            applied=self.applied,
        )
