"""
Module: landed_kernel.db.types
Responsibility: Decimal arithmetic helpers used for every KWD amount.
    Centralizes precision, rounding, parsing and string formatting so
    allocation, vouchers and settlements agree on every figure to the
    last fils.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/ and outer layers.  MUST NOT import from any of those layers.

Invariants enforced:
    - Every monetary column stores 3 decimal places (Numeric(14, 3)).
    - round_money() is the ONLY sanctioned rounding function; it rounds
      ROUND_HALF_UP to MONEY_DECIMAL_PLACES unless told otherwise.
    - No floats.  parse_money() rejects float input outright: a binary
      float has already lost the exact value the user typed.

Failure modes:
    - ValueError on float input, non-numeric strings, or non-finite values.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

MONEY_DECIMAL_PLACES = 3
DEFAULT_ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given decimal places.

    Preconditions: value is a Decimal.
    Postconditions: Returns value quantized with the given rounding mode.

    Args:
        value: The Decimal value to round.
        decimal_places: Number of decimal places (default 3, KWD fils).
        rounding: Rounding mode (default: ROUND_HALF_UP).
    """
    quantize_str = "0." + "0" * decimal_places if decimal_places > 0 else "1"
    return value.quantize(Decimal(quantize_str), rounding=rounding)


def money_from_str(value: str) -> Decimal:
    """
    Create a Money value from string.

    Raises:
        ValueError: If value cannot be converted to a finite Decimal.
    """
    try:
        result = Decimal(value.strip())
    except (InvalidOperation, AttributeError) as exc:
        raise ValueError(f"Not a numeric amount: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Not a finite amount: {value!r}")
    return result


def parse_money(value: Decimal | str | int | None, default: Decimal = ZERO) -> Decimal:
    """
    Normalize user-supplied money input to a Decimal.

    None and blank strings become ``default``; ints and Decimals pass
    through; floats are refused.

    Raises:
        ValueError: On float input or non-numeric strings.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(f"Not a numeric amount: {value!r}")
    if isinstance(value, float):
        raise ValueError(
            f"Float amount {value!r} rejected; pass a string or Decimal"
        )
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Not a finite amount: {value!r}")
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, str):
        if not value.strip():
            return default
        return money_from_str(value)
    raise ValueError(f"Unsupported amount type: {type(value).__name__}")


def format_money(value: Decimal | None, decimal_places: int = MONEY_DECIMAL_PLACES) -> str:
    """
    Render an amount as a fixed-point string, e.g. ``"123.450"``.

    This is the wire format for every monetary field.
    """
    if value is None:
        value = ZERO
    return f"{round_money(value, decimal_places):f}"
