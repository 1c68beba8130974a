"""
Module: landed_kernel.models.purchase_order
Responsibility: ORM persistence for purchase orders and their line items.
    The landed-cost module only reads these rows; it never changes them.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - po_number is unique.
    - quantity is a non-negative integer (ck_po_line_quantity).
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from landed_kernel.db.base import TrackedBase


class PurchaseOrder(TrackedBase):
    """Purchase order raised against a supplier."""

    __tablename__ = "purchase_orders"

    __table_args__ = (
        Index("idx_po_supplier", "supplier_id"),
        Index("idx_po_date", "order_date"),
    )

    po_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    supplier_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("parties.id"),
        nullable=True,
    )

    order_date: Mapped[date] = mapped_column(Date, nullable=False)

    invoice_number: Mapped[str | None] = mapped_column(String(100), nullable=True)

    line_items: Mapped[list["PurchaseOrderLineItem"]] = relationship(
        back_populates="purchase_order",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderLineItem.line_number",
    )

    def __repr__(self) -> str:
        return f"<PurchaseOrder {self.po_number}>"


class PurchaseOrderLineItem(TrackedBase):
    """One priced, counted item on a purchase order."""

    __tablename__ = "purchase_order_line_items"

    __table_args__ = (
        Index("idx_po_line_order", "purchase_order_id"),
        CheckConstraint("quantity >= 0", name="ck_po_line_quantity"),
    )

    purchase_order_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchase_orders.id", ondelete="CASCADE"),
        nullable=False,
    )

    line_number: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    item_name: Mapped[str] = mapped_column(String(255), nullable=False)

    item_category: Mapped[str | None] = mapped_column(String(100), nullable=True)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    unit_price_kwd: Mapped[Decimal] = mapped_column(nullable=False)

    purchase_order: Mapped[PurchaseOrder] = relationship(back_populates="line_items")
