"""Kernel services: flush-only persistence behind the module services."""

from landed_kernel.services.party_service import PartyService
from landed_kernel.services.payment_service import PaymentService
from landed_kernel.services.purchase_order_service import PurchaseOrderService
from landed_kernel.services.sequence_service import DocumentNumbering, SequenceService

__all__ = [
    "DocumentNumbering",
    "PartyService",
    "PaymentService",
    "PurchaseOrderService",
    "SequenceService",
]
