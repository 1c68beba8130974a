"""Pure calculation engines for the landed-cost ledger."""

from landed_engines.allocation import (
    AllocatedLineItem,
    AllocationCalculator,
    AllocationResult,
    ChargeCategory,
    LineItemInput,
    packing_charge_for,
)

__all__ = [
    "AllocatedLineItem",
    "AllocationCalculator",
    "AllocationResult",
    "ChargeCategory",
    "LineItemInput",
    "packing_charge_for",
]
