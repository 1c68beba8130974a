"""
Module: landed_engines.allocation
Responsibility:
    Spread a voucher's shared charges (freight, partner profit, packing)
    across every purchased unit, and derive each line's landed cost.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import landed_kernel.db.types (rounding helpers) and
    landed_kernel.logging_config.

Invariants enforced:
    - Quantity-weighted: every unit carries the same share of a charge,
      whatever PO or item category it came from.
    - Per-unit shares are round3(total / Q), ROUND_HALF_UP.
    - landed cost per unit = unit price + the three shares, each already
      at 3 dp.  Line totals are round3(per-unit x quantity).
    - Output lines keep input order.
    - Q = 0 never raises: shares are zero and landed cost equals price.

    The sum of allocated shares may differ from the charge total by up to
    Q x 0.0005 per category.  The drift is reported, never corrected.

Failure modes:
    - ValueError on negative totals, negative or non-integer quantities,
      or negative unit prices.  Callers are expected to validate first.

Usage:
    from landed_engines.allocation import AllocationCalculator, LineItemInput

    result = AllocationCalculator().allocate(
        line_items=[LineItemInput(item_name="Phone", quantity=10,
                                  unit_price_kwd=Decimal("5.000"))],
        freight_total=Decimal("30.000"),
        partner_total=Decimal("15.000"),
        packing_total=Decimal("0"),
    )
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from uuid import UUID

from landed_engines.tracer import traced_engine
from landed_kernel.db.types import ZERO, round_money
from landed_kernel.logging_config import get_logger

logger = get_logger("engines.allocation")


class ChargeCategory(str, Enum):
    """The three shared charges carried by a landed cost voucher."""

    FREIGHT = "freight"
    PARTNER = "partner"
    PACKING = "packing"


@dataclass(frozen=True)
class LineItemInput:
    """
    A pooled purchase order line fed to the calculator.

    Guarantees:
        - quantity is a non-negative int.
        - unit_price_kwd is a non-negative Decimal.
    """

    item_name: str
    quantity: int
    unit_price_kwd: Decimal
    item_category: str | None = None
    source_line_item_id: UUID | None = None
    purchase_order_id: UUID | None = None

    def __post_init__(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValueError(f"Quantity must be an integer, got {self.quantity!r}")
        if self.quantity < 0:
            raise ValueError(f"Quantity cannot be negative: {self.quantity}")
        if not isinstance(self.unit_price_kwd, Decimal):
            raise ValueError(f"Unit price must be Decimal, got {type(self.unit_price_kwd).__name__}")
        if self.unit_price_kwd < ZERO:
            raise ValueError(f"Unit price cannot be negative: {self.unit_price_kwd}")


@dataclass(frozen=True)
class AllocatedLineItem:
    """One line after allocation.  All amounts are KWD at 3 dp."""

    item_name: str
    item_category: str | None
    quantity: int
    unit_price_kwd: Decimal
    line_total_kwd: Decimal
    freight_per_unit_kwd: Decimal
    partner_profit_per_unit_kwd: Decimal
    packing_per_unit_kwd: Decimal
    landed_cost_per_unit_kwd: Decimal
    total_landed_cost_kwd: Decimal
    source_line_item_id: UUID | None = None
    purchase_order_id: UUID | None = None

    def per_unit(self, category: ChargeCategory) -> Decimal:
        match ChargeCategory(category):
            case ChargeCategory.FREIGHT:
                return self.freight_per_unit_kwd
            case ChargeCategory.PARTNER:
                return self.partner_profit_per_unit_kwd
            case ChargeCategory.PACKING:
                return self.packing_per_unit_kwd


@dataclass(frozen=True)
class AllocationResult:
    """
    Complete allocation result.

    Guarantees:
        - ``lines`` is in input order.
        - ``rounding_drift(c) == allocated_total(c) - charge_total(c)``.
    """

    lines: tuple[AllocatedLineItem, ...]
    total_quantity: int
    freight_total: Decimal
    partner_total: Decimal
    packing_total: Decimal
    freight_per_unit: Decimal
    partner_per_unit: Decimal
    packing_per_unit: Decimal

    def charge_total(self, category: ChargeCategory) -> Decimal:
        match ChargeCategory(category):
            case ChargeCategory.FREIGHT:
                return self.freight_total
            case ChargeCategory.PARTNER:
                return self.partner_total
            case ChargeCategory.PACKING:
                return self.packing_total

    def per_unit(self, category: ChargeCategory) -> Decimal:
        match ChargeCategory(category):
            case ChargeCategory.FREIGHT:
                return self.freight_per_unit
            case ChargeCategory.PARTNER:
                return self.partner_per_unit
            case ChargeCategory.PACKING:
                return self.packing_per_unit

    def allocated_total(self, category: ChargeCategory) -> Decimal:
        """Sum of the category's share over every unit."""
        return sum(
            (line.per_unit(category) * line.quantity for line in self.lines),
            ZERO,
        )

    def rounding_drift(self, category: ChargeCategory) -> Decimal:
        return self.allocated_total(category) - self.charge_total(category)

    @property
    def total_landed_cost(self) -> Decimal:
        return sum((line.total_landed_cost_kwd for line in self.lines), ZERO)

    @property
    def goods_total(self) -> Decimal:
        return sum((line.line_total_kwd for line in self.lines), ZERO)


def packing_charge_for(total_quantity: int, rate_per_unit: Decimal) -> Decimal:
    """Default packing charge: a flat rate per unit, rounded to 3 dp."""
    if total_quantity < 0:
        raise ValueError(f"Quantity cannot be negative: {total_quantity}")
    return round_money(rate_per_unit * total_quantity)


class AllocationCalculator:
    """
    Quantity-weighted landed cost allocation.

    Contract:
        Pure function of its inputs.  Safe to call concurrently.
    Non-goals:
        - Value-weighted allocation.
        - Correcting rounding drift onto a designated line.
    """

    @staticmethod
    def _share(total: Decimal, quantity: int) -> Decimal:
        if quantity == 0:
            return round_money(ZERO)
        return round_money(total / quantity)

    @traced_engine(
        "landed_cost_allocation",
        "1.0",
        fingerprint_fields=("freight_total", "partner_total", "packing_total"),
    )
    def allocate(
        self,
        line_items: Sequence[LineItemInput],
        freight_total: Decimal,
        partner_total: Decimal,
        packing_total: Decimal,
    ) -> AllocationResult:
        """
        Allocate the three charge totals across the pooled line items.

        Raises:
            ValueError: If any total is negative or not a Decimal.
        """
        for name, total in (
            ("freight_total", freight_total),
            ("partner_total", partner_total),
            ("packing_total", packing_total),
        ):
            if not isinstance(total, Decimal):
                raise ValueError(f"{name} must be Decimal, got {type(total).__name__}")
            if total < ZERO:
                raise ValueError(f"{name} cannot be negative: {total}")

        total_quantity = sum(item.quantity for item in line_items)

        freight_pu = self._share(freight_total, total_quantity)
        partner_pu = self._share(partner_total, total_quantity)
        packing_pu = self._share(packing_total, total_quantity)

        if total_quantity == 0:
            logger.warning(
                "allocation_zero_quantity",
                extra={"line_count": len(line_items)},
            )

        lines = []
        for item in line_items:
            unit_price = round_money(item.unit_price_kwd)
            landed_pu = unit_price + freight_pu + partner_pu + packing_pu
            lines.append(
                AllocatedLineItem(
                    item_name=item.item_name,
                    item_category=item.item_category,
                    quantity=item.quantity,
                    unit_price_kwd=unit_price,
                    line_total_kwd=round_money(unit_price * item.quantity),
                    freight_per_unit_kwd=freight_pu,
                    partner_profit_per_unit_kwd=partner_pu,
                    packing_per_unit_kwd=packing_pu,
                    landed_cost_per_unit_kwd=landed_pu,
                    total_landed_cost_kwd=round_money(landed_pu * item.quantity),
                    source_line_item_id=item.source_line_item_id,
                    purchase_order_id=item.purchase_order_id,
                )
            )

        result = AllocationResult(
            lines=tuple(lines),
            total_quantity=total_quantity,
            freight_total=freight_total,
            partner_total=partner_total,
            packing_total=packing_total,
            freight_per_unit=freight_pu,
            partner_per_unit=partner_pu,
            packing_per_unit=packing_pu,
        )

        logger.info(
            "allocation_completed",
            extra={
                "line_count": len(lines),
                "total_quantity": total_quantity,
                "freight_per_unit": str(freight_pu),
                "partner_per_unit": str(partner_pu),
                "packing_per_unit": str(packing_pu),
            },
        )
        return result
