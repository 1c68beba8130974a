"""Pure domain values: money, exchange rates, clocks, DTOs and workflow types."""

from landed_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from landed_kernel.domain.directories import (
    PartyDirectory,
    PaymentSink,
    PurchaseOrderDirectory,
    VoucherNumbering,
)
from landed_kernel.domain.dtos import LineItemInfo, NewLineItem, PartyInfo, PaymentRequest
from landed_kernel.domain.values import BASE_CURRENCY, Currency, ExchangeRate, Money
from landed_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "BASE_CURRENCY",
    "Clock",
    "Currency",
    "DeterministicClock",
    "ExchangeRate",
    "Guard",
    "LineItemInfo",
    "Money",
    "NewLineItem",
    "PartyDirectory",
    "PartyInfo",
    "PaymentRequest",
    "PaymentSink",
    "PurchaseOrderDirectory",
    "SystemClock",
    "Transition",
    "VoucherNumbering",
    "Workflow",
]
