"""ORM models owned by the kernel: parties, purchase orders, payments, counters."""

from landed_kernel.models.party import Party, PartyType
from landed_kernel.models.payment import Payment, PaymentDirection
from landed_kernel.models.purchase_order import PurchaseOrder, PurchaseOrderLineItem
from landed_kernel.models.sequence import SequenceCounter

__all__ = [
    "Party",
    "PartyType",
    "Payment",
    "PaymentDirection",
    "PurchaseOrder",
    "PurchaseOrderLineItem",
    "SequenceCounter",
]
