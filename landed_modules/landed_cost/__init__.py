"""
Landed Cost Module (``landed_modules.landed_cost``).

Responsibility
--------------
Landed cost vouchers over one or more purchase orders: quantity-weighted
allocation of freight, partner profit and packing; three independent
payables per voucher; batched per-party settlements.

Architecture position
---------------------
**Modules layer** -- frozen domain models, ORM, declarative workflows and
two service facades (``LandedCostVoucherService``, ``SettlementService``)
that delegate arithmetic to ``landed_engines`` and reads/payments to the
kernel directories.

Invariants enforced
-------------------
* Transaction boundary owned by each service method; commit/rollback is
  explicit per operation.
* Payables move ``pending -> paid`` only through a compare-and-set.
* A settlement's voucher set and amounts are fixed at creation.

Failure modes
-------------
* ``LandedCostError`` subclasses from ``landed_kernel.exceptions``.
* Database exceptions propagate after session rollback.
"""

from landed_modules.landed_cost.models import (
    FinalizeResult,
    FreightLeg,
    FreightLegInput,
    PartyDues,
    Payable,
    PayableCategory,
    PayableStatus,
    PaymentDetails,
    Settlement,
    SettlementLine,
    SettlementPartyType,
    SettlementStatus,
    Voucher,
    VoucherInput,
    VoucherLine,
)
from landed_modules.landed_cost.payables import PayableStateMachine
from landed_modules.landed_cost.service import LandedCostVoucherService
from landed_modules.landed_cost.settlement import SettlementService
from landed_modules.landed_cost.workflows import PAYABLE_WORKFLOW, SETTLEMENT_WORKFLOW

__all__ = [
    "FinalizeResult",
    "FreightLeg",
    "FreightLegInput",
    "LandedCostVoucherService",
    "PAYABLE_WORKFLOW",
    "PartyDues",
    "Payable",
    "PayableCategory",
    "PayableStateMachine",
    "PayableStatus",
    "PaymentDetails",
    "SETTLEMENT_WORKFLOW",
    "Settlement",
    "SettlementLine",
    "SettlementPartyType",
    "SettlementService",
    "SettlementStatus",
    "Voucher",
    "VoucherInput",
    "VoucherLine",
]
