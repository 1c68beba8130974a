"""
Configuration Schema (``landed_config.schema``).

Responsibility
--------------
Frozen dataclass describing one landed-cost configuration set, as loaded
from YAML.  Validation happens at construction so an invalid set never
reaches a service.

Architecture position
---------------------
**Config layer** -- pure data definitions, zero I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

CATEGORIES: tuple[str, ...] = ("freight", "partner", "packing")

PARTY_TYPES: tuple[str, ...] = (
    "supplier",
    "customer",
    "salesman",
    "logistic",
    "packing",
    "partner",
)

DEFAULT_ELIGIBLE_PARTY_TYPES: dict[str, tuple[str, ...]] = {
    "freight": ("logistic", "supplier"),
    "partner": ("partner", "supplier"),
    "packing": ("packing", "supplier"),
}


@dataclass(frozen=True)
class LandedCostConfig:
    """
    Runtime configuration for the landed-cost module.

    Guarantees:
        - packing_rate_per_unit is a non-negative Decimal.
        - Every category key is one of freight/partner/packing.
        - Every eligible party type is a known party type.
        - Number widths are at least 1.
    """

    config_id: str = "default"
    version: int = 1
    currency: str = "KWD"
    money_decimal_places: int = 3
    packing_rate_per_unit: Decimal = Decimal("0.210")
    default_parties: dict[str, UUID] = field(default_factory=dict)
    eligible_party_types: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_ELIGIBLE_PARTY_TYPES)
    )
    voucher_prefix: str = "LCV"
    voucher_number_width: int = 4
    settlement_prefix: str = "SETTLE"
    settlement_number_width: int = 5
    default_fx_rates: dict[str, Decimal] = field(default_factory=dict)
    checksum: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.packing_rate_per_unit, Decimal):
            raise ValueError("packing_rate_per_unit must be a Decimal")
        if self.packing_rate_per_unit < 0:
            raise ValueError(
                f"packing_rate_per_unit cannot be negative: {self.packing_rate_per_unit}"
            )
        if self.money_decimal_places < 0:
            raise ValueError("money_decimal_places cannot be negative")
        for category in self.default_parties:
            if category not in CATEGORIES:
                raise ValueError(f"Unknown category in default_parties: {category!r}")
        for category, types in self.eligible_party_types.items():
            if category not in CATEGORIES:
                raise ValueError(f"Unknown category in eligible_party_types: {category!r}")
            unknown = set(types) - set(PARTY_TYPES)
            if unknown:
                raise ValueError(
                    f"Unknown party types for {category}: {sorted(unknown)}"
                )
        if self.voucher_number_width < 1 or self.settlement_number_width < 1:
            raise ValueError("Number widths must be at least 1")
        if not self.voucher_prefix or not self.settlement_prefix:
            raise ValueError("Number prefixes cannot be empty")
        for currency, rate in self.default_fx_rates.items():
            if rate <= 0:
                raise ValueError(f"FX rate for {currency} must be positive: {rate}")

    def eligible_types_for(self, category: str) -> tuple[str, ...]:
        """Party types allowed as payee for a category."""
        return self.eligible_party_types.get(
            category, DEFAULT_ELIGIBLE_PARTY_TYPES[category]
        )

    def default_party_for(self, category: str) -> UUID | None:
        return self.default_parties.get(category)
