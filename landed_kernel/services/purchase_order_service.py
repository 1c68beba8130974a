"""
Service layer for purchase orders.

The default PurchaseOrderDirectory: the landed-cost module pools line
items through ``list_line_items``.  ``create_purchase_order`` exists for
data entry and test setup; purchase order management proper lives
outside the ledger.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import select

from landed_kernel.db.types import round_money
from landed_kernel.domain.dtos import LineItemInfo, NewLineItem
from landed_kernel.exceptions import PurchaseOrderNotFoundError, ValidationError
from landed_kernel.logging_config import get_logger
from landed_kernel.models.purchase_order import PurchaseOrder, PurchaseOrderLineItem
from landed_kernel.services.base import BaseService

logger = get_logger("services.purchase_order")


class PurchaseOrderService(BaseService[PurchaseOrder]):
    """Reads purchase orders as LineItemInfo DTOs."""

    def _get(self, purchase_order_id: UUID) -> PurchaseOrder:
        po = self.session.get(PurchaseOrder, purchase_order_id)
        if po is None:
            raise PurchaseOrderNotFoundError(str(purchase_order_id))
        return po

    def list_line_items(self, purchase_order_id: UUID) -> list[LineItemInfo]:
        """
        Line items of one purchase order, in entry order.

        Raises:
            PurchaseOrderNotFoundError: If the PO does not exist.
        """
        self._get(purchase_order_id)
        stmt = (
            select(PurchaseOrderLineItem)
            .where(PurchaseOrderLineItem.purchase_order_id == purchase_order_id)
            .order_by(PurchaseOrderLineItem.line_number)
        )
        return [
            LineItemInfo(
                id=line.id,
                purchase_order_id=line.purchase_order_id,
                item_name=line.item_name,
                item_category=line.item_category,
                quantity=line.quantity,
                unit_price_kwd=line.unit_price_kwd,
            )
            for line in self.session.execute(stmt).scalars()
        ]

    def create_purchase_order(
        self,
        po_number: str,
        order_date: date,
        lines: list[NewLineItem],
        actor_id: UUID,
        supplier_id: UUID | None = None,
        invoice_number: str | None = None,
    ) -> UUID:
        """
        Record a purchase order with its lines.

        Raises:
            ValidationError: On a negative quantity or unit price.
        """
        po = PurchaseOrder(
            po_number=po_number,
            order_date=order_date,
            supplier_id=supplier_id,
            invoice_number=invoice_number,
            created_by_id=actor_id,
        )
        for index, line in enumerate(lines):
            if line.quantity < 0:
                raise ValidationError(
                    f"Quantity must be non-negative on line {index + 1}",
                    field="quantity",
                )
            if line.unit_price_kwd < 0:
                raise ValidationError(
                    f"Unit price must be non-negative on line {index + 1}",
                    field="unit_price_kwd",
                )
            po.line_items.append(
                PurchaseOrderLineItem(
                    line_number=index,
                    item_name=line.item_name,
                    item_category=line.item_category,
                    quantity=line.quantity,
                    unit_price_kwd=round_money(line.unit_price_kwd),
                    created_by_id=actor_id,
                )
            )
        self.session.add(po)
        self.session.flush()
        logger.info(
            "purchase_order_created",
            extra={"po_number": po_number, "line_count": len(lines)},
        )
        return po.id
