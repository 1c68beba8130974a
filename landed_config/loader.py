"""
Configuration Loader (``landed_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into a frozen
``LandedCostConfig``.  Runtime callers go through
``landed_config.get_active_config()`` instead of calling this directly.

Invariants enforced
-------------------
* Decimal settings must be quoted in YAML; a bare float is refused so the
  configured rate is exactly what was written.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any
from uuid import UUID

import yaml

from landed_config.schema import DEFAULT_ELIGIBLE_PARTY_TYPES, LandedCostConfig


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, name: str) -> Decimal:
    """Parse a quoted decimal or an int.  Floats are refused."""
    if isinstance(value, bool) or isinstance(value, float):
        raise ValueError(f"{name} must be a quoted decimal string, got {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"{name} is not a decimal: {value!r}") from exc


def parse_uuid(value: Any, name: str) -> UUID:
    try:
        return UUID(str(value))
    except ValueError as exc:
        raise ValueError(f"{name} is not a UUID: {value!r}") from exc


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_config(data: dict[str, Any]) -> LandedCostConfig:
    """
    Build a ``LandedCostConfig`` from a parsed YAML dict.

    Keys left out fall back to the schema defaults.  A ``null`` default
    party means "no default" for that category.
    """
    numbering = data.get("numbering", {}) or {}

    default_parties = {
        category: parse_uuid(party_id, f"default_parties.{category}")
        for category, party_id in (data.get("default_parties") or {}).items()
        if party_id is not None
    }

    eligible = dict(DEFAULT_ELIGIBLE_PARTY_TYPES)
    for category, types in (data.get("eligible_party_types") or {}).items():
        eligible[category] = tuple(types or ())

    fx_rates = {
        str(currency).upper(): parse_decimal(rate, f"default_fx_rates.{currency}")
        for currency, rate in (data.get("default_fx_rates") or {}).items()
    }

    return LandedCostConfig(
        config_id=data.get("config_id", "default"),
        version=int(data.get("version", 1)),
        currency=data.get("currency", "KWD"),
        money_decimal_places=int(data.get("money_decimal_places", 3)),
        packing_rate_per_unit=parse_decimal(
            data.get("packing_rate_per_unit", "0.210"), "packing_rate_per_unit"
        ),
        default_parties=default_parties,
        eligible_party_types=eligible,
        voucher_prefix=numbering.get("voucher_prefix", "LCV"),
        voucher_number_width=int(numbering.get("voucher_number_width", 4)),
        settlement_prefix=numbering.get("settlement_prefix", "SETTLE"),
        settlement_number_width=int(numbering.get("settlement_number_width", 5)),
        default_fx_rates=fx_rates,
        checksum=compute_checksum(data),
    )


def load_config(path: Path) -> LandedCostConfig:
    """Load and parse a configuration file."""
    return parse_config(load_yaml_file(path))
