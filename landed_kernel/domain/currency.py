"""Currency -- ISO 4217 registry for the currencies freight legs are quoted in."""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    """Information about a single ISO 4217 currency."""

    code: str
    decimal_places: int
    name: str

    @property
    def rounding_tolerance(self) -> Decimal:
        """Smallest representable unit, e.g. 0.001 for KWD."""
        if self.decimal_places == 0:
            return Decimal("1")
        return Decimal("0." + "0" * (self.decimal_places - 1) + "1")

    @property
    def quantize_string(self) -> str:
        """String for Decimal.quantize() to round to this currency's precision."""
        if self.decimal_places == 0:
            return "1"
        return "0." + "0" * self.decimal_places


class CurrencyRegistry:
    """Registry of the currencies used on purchase orders and freight legs."""

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        # Gulf dinars (fils precision)
        "KWD": CurrencyInfo("KWD", 3, "Kuwaiti Dinar"),
        "BHD": CurrencyInfo("BHD", 3, "Bahraini Dinar"),
        "OMR": CurrencyInfo("OMR", 3, "Omani Rial"),
        "JOD": CurrencyInfo("JOD", 3, "Jordanian Dinar"),
        "IQD": CurrencyInfo("IQD", 3, "Iraqi Dinar"),
        # Trade lane currencies
        "AED": CurrencyInfo("AED", 2, "UAE Dirham"),
        "SAR": CurrencyInfo("SAR", 2, "Saudi Riyal"),
        "QAR": CurrencyInfo("QAR", 2, "Qatari Riyal"),
        "HKD": CurrencyInfo("HKD", 2, "Hong Kong Dollar"),
        "CNY": CurrencyInfo("CNY", 2, "Chinese Yuan"),
        "USD": CurrencyInfo("USD", 2, "US Dollar"),
        "EUR": CurrencyInfo("EUR", 2, "Euro"),
        "GBP": CurrencyInfo("GBP", 2, "Pound Sterling"),
        "INR": CurrencyInfo("INR", 2, "Indian Rupee"),
        "JPY": CurrencyInfo("JPY", 0, "Japanese Yen"),
    }

    @classmethod
    def is_valid(cls, code: str) -> bool:
        """Check whether a currency code is registered."""
        return bool(code) and code.upper() in cls._CURRENCIES

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        return cls._CURRENCIES.get(code.upper()) if code else None

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        """
        Decimal places for a currency.

        Raises:
            ValueError: If the code is not registered.
        """
        info = cls.get_info(code)
        if info is None:
            raise ValueError(f"Unknown currency code: {code}")
        return info.decimal_places

    @classmethod
    def get_rounding_tolerance(cls, code: str) -> Decimal:
        info = cls.get_info(code)
        if info is None:
            raise ValueError(f"Unknown currency code: {code}")
        return info.rounding_tolerance

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._CURRENCIES)
