# rfq_collateral/conversions.py
from decimal import Decimal, ROUND_DOWN


def to_decimal(value) -> Decimal:
    """
    Convert user or config input to Decimal.

    Floats go through ``repr`` so 0.1 stays 0.1 instead of its binary
    expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def remove_decimals(value: int, decimals: int) -> Decimal:
    """Raw fixed-point integer -> Decimal units."""
    return Decimal(int(value)).scaleb(-decimals)


def add_decimals(value, decimals: int) -> int:
    """Decimal units -> raw fixed-point integer, truncating extra digits."""
    scaled = to_decimal(value).scaleb(decimals)
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def quantum(decimals: int) -> Decimal:
    return Decimal(1).scaleb(-decimals)


def truncate(value: Decimal, decimals: int) -> Decimal:
    return value.quantize(quantum(decimals), rounding=ROUND_DOWN)
