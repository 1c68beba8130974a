"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides Currency, Money and ExchangeRate.  Money pairs a Decimal
    amount with its currency; ExchangeRate converts a freight leg quoted
    in a foreign currency into KWD using a fixed snapshot rate.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    No outward dependencies except landed_kernel.domain.currency.

Invariants enforced:
    - Amounts are Decimal, never float.  Floats are refused outright.
    - Currency codes are validated at construction time.
    - Rounding precision comes from the currency (3 dp for KWD).

Failure modes:
    - ValueError on invalid amounts, currencies, or rates.
    - ValueError when arithmetic mixes different currencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from landed_kernel.domain.currency import CurrencyRegistry

BASE_CURRENCY = "KWD"


def _to_decimal(value: object, what: str) -> Decimal:
    if isinstance(value, bool) or isinstance(value, float):
        raise ValueError(f"Invalid {what}: {value!r} (float input is not accepted)")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise ValueError(f"Invalid {what}: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Invalid {what}: {value!r}")
    return result


@dataclass(frozen=True, slots=True)
class Currency:
    """
    ISO 4217 currency code value object.

    Guarantees:
        - code is always uppercase and registered in CurrencyRegistry.
    """

    code: str

    def __post_init__(self) -> None:
        normalized = self.code.upper().strip() if self.code else ""
        if not CurrencyRegistry.is_valid(normalized):
            raise ValueError(f"Invalid ISO 4217 currency code: {self.code}")
        object.__setattr__(self, "code", normalized)

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.code)

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object.

    Contract:
        Pairs a Decimal amount with its Currency.  Defaults to KWD, the
        currency every voucher and settlement total is kept in.

    Guarantees:
        - amount is always a Decimal (never float).
        - Arithmetic operations enforce same-currency.

    Non-goals:
        - Does NOT auto-round -- callers must explicitly call .round().
    """

    amount: Decimal
    currency: Currency = Currency(BASE_CURRENCY)

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", _to_decimal(self.amount, "amount"))
        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def of(
        cls,
        amount: Decimal | str | int,
        currency: str | Currency = BASE_CURRENCY,
    ) -> Money:
        """
        Factory method for creating Money.

        Raises:
            ValueError: If amount cannot be converted (floats included)
                or currency is invalid.
        """
        if isinstance(currency, str):
            currency = Currency(currency)
        return cls(amount=_to_decimal(amount, "amount"), currency=currency)

    @classmethod
    def zero(cls, currency: str | Currency = BASE_CURRENCY) -> Money:
        """Create a zero amount in the given currency."""
        if isinstance(currency, str):
            currency = Currency(currency)
        return cls(amount=Decimal("0"), currency=currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == Decimal("0")

    @property
    def is_positive(self) -> bool:
        return self.amount > Decimal("0")

    @property
    def is_negative(self) -> bool:
        return self.amount < Decimal("0")

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Round to the currency's decimal places (half-up by default)."""
        decimal_places = self.currency.decimal_places
        quantize_str = "0." + "0" * decimal_places if decimal_places > 0 else "1"
        rounded = self.amount.quantize(Decimal(quantize_str), rounding=rounding)
        return Money(amount=rounded, currency=self.currency)

    def to_str(self) -> str:
        """Fixed-point string at currency precision, e.g. ``"123.450"``."""
        return f"{self.round().amount:f}"

    def _check_currency(self, other: Money, op: str) -> None:
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot {op} Money with different currencies: "
                f"{self.currency} and {other.currency}"
            )

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "add")
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "subtract")
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __neg__(self) -> Money:
        return Money(amount=-self.amount, currency=self.currency)

    def __mul__(self, factor: Decimal | int) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            return NotImplemented
        return Money(amount=self.amount * Decimal(factor), currency=self.currency)

    def __rmul__(self, factor: Decimal | int) -> Money:
        return self.__mul__(factor)

    def __truediv__(self, divisor: Decimal | int) -> Money:
        if isinstance(divisor, bool) or not isinstance(divisor, (int, Decimal)):
            return NotImplemented
        return Money(amount=self.amount / Decimal(divisor), currency=self.currency)

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount >= other.amount

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency!r})"


@dataclass(frozen=True, slots=True)
class ExchangeRate:
    """
    Fixed exchange rate snapshot between two currencies.

    Contract:
        1 unit of from_currency = rate units of to_currency.  The rate is
        whatever was entered on the voucher; nothing looks it up.

    Guarantees:
        - rate is always a positive Decimal.
        - convert() enforces currency matching.
    """

    from_currency: Currency
    to_currency: Currency
    rate: Decimal

    def __post_init__(self) -> None:
        if isinstance(self.from_currency, str):
            object.__setattr__(self, "from_currency", Currency(self.from_currency))
        if isinstance(self.to_currency, str):
            object.__setattr__(self, "to_currency", Currency(self.to_currency))
        object.__setattr__(self, "rate", _to_decimal(self.rate, "exchange rate"))
        if self.rate <= Decimal("0"):
            raise ValueError(f"Exchange rate must be positive: {self.rate}")

    @classmethod
    def of(
        cls,
        from_currency: str | Currency,
        to_currency: str | Currency,
        rate: Decimal | str | int,
    ) -> ExchangeRate:
        return cls(from_currency=from_currency, to_currency=to_currency, rate=rate)

    @classmethod
    def to_base(cls, from_currency: str | Currency, rate: Decimal | str | int) -> ExchangeRate:
        """Rate from ``from_currency`` into KWD."""
        return cls(from_currency=from_currency, to_currency=BASE_CURRENCY, rate=rate)

    def convert(self, money: Money) -> Money:
        """
        Convert money into to_currency, rounded to its precision.

        Raises:
            ValueError: If money currency doesn't match from_currency.
        """
        if money.currency != self.from_currency:
            raise ValueError(
                f"Money currency {money.currency} doesn't match "
                f"rate from_currency {self.from_currency}"
            )
        return Money(amount=money.amount * self.rate, currency=self.to_currency).round()

    @property
    def pair(self) -> tuple[str, str]:
        return (self.from_currency.code, self.to_currency.code)

    def __str__(self) -> str:
        return f"{self.from_currency}/{self.to_currency} = {self.rate}"
