"""
Typed Exception Hierarchy for the Landed-Cost Ledger.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the voucher and settlement services (an HTTP layer, a CLI, a
batch job) must be able to tell a bad form submission apart from an
attempt to pay a category twice, without parsing message strings.

Every exception here:
  1. Has its own class (catch by type, not message)
  2. Carries a ``code`` class attribute (machine-readable, API-safe)
  3. Stores structured data as attributes (not just a message string)

Example:
    try:
        service.pay_category(voucher_id, PayableCategory.PARTNER, details)
    except InvalidStateError as e:
        api_response(status=409, code=e.code, state=e.state)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LandedCostError (base)
    |
    +-- ValidationError
    |
    +-- InvalidStateError
    |
    +-- ConflictError
    |
    +-- NotFoundError
        +-- VoucherNotFoundError
        +-- SettlementNotFoundError
        +-- PartyNotFoundError
        +-- PurchaseOrderNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                     | When Raised
-------------------------|-----------------------------------------------
VALIDATION_ERROR         | No PO selected, negative/non-numeric charge,
                         | missing or ineligible party, bad period
INVALID_STATE            | Paying a paid category, finalizing a
                         | finalized settlement, lost compare-and-set
CONFLICT                 | Deleting a voucher that was paid or settled
VOUCHER_NOT_FOUND        | Voucher id does not exist
SETTLEMENT_NOT_FOUND     | Settlement id does not exist
PARTY_NOT_FOUND          | Party id does not exist in the directory
PURCHASE_ORDER_NOT_FOUND | Purchase order id does not exist

Partial success of a settlement finalize is NOT an error: it is returned
as ``FinalizeResult.skipped_voucher_ids``.
===============================================================================
"""


class LandedCostError(Exception):
    """
    Base exception for all landed-cost ledger errors.

    All subclasses must have a ``code`` class attribute for
    machine-readable error identification.
    """

    code: str = "LANDED_COST_ERROR"


class ValidationError(LandedCostError):
    """Input rejected before anything was persisted."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class InvalidStateError(LandedCostError):
    """Operation not allowed in the entity's current state."""

    code: str = "INVALID_STATE"

    def __init__(self, entity: str, entity_id: str, state: str, reason: str):
        self.entity = entity
        self.entity_id = entity_id
        self.state = state
        self.reason = reason
        super().__init__(f"{entity} {entity_id} is {state}: {reason}")


class ConflictError(LandedCostError):
    """Operation would desynchronize ledger state."""

    code: str = "CONFLICT"

    def __init__(self, entity: str, entity_id: str, reason: str):
        self.entity = entity
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(f"{entity} {entity_id}: {reason}")


# Lookup failures


class NotFoundError(LandedCostError):
    """Base exception for missing records."""

    code: str = "NOT_FOUND"


class VoucherNotFoundError(NotFoundError):
    """Landed cost voucher with given ID was not found."""

    code: str = "VOUCHER_NOT_FOUND"

    def __init__(self, voucher_id: str):
        self.voucher_id = voucher_id
        super().__init__(f"Voucher not found: {voucher_id}")


class SettlementNotFoundError(NotFoundError):
    """Party settlement with given ID was not found."""

    code: str = "SETTLEMENT_NOT_FOUND"

    def __init__(self, settlement_id: str):
        self.settlement_id = settlement_id
        super().__init__(f"Settlement not found: {settlement_id}")


class PartyNotFoundError(NotFoundError):
    """Party with given ID was not found."""

    code: str = "PARTY_NOT_FOUND"

    def __init__(self, party_id: str):
        self.party_id = party_id
        super().__init__(f"Party not found: {party_id}")


class PurchaseOrderNotFoundError(NotFoundError):
    """Purchase order with given ID was not found."""

    code: str = "PURCHASE_ORDER_NOT_FOUND"

    def __init__(self, purchase_order_id: str):
        self.purchase_order_id = purchase_order_id
        super().__init__(f"Purchase order not found: {purchase_order_id}")
