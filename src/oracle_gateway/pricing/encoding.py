"""Fixed-point oracle price encoding.

On-chain price consumers expect USD prices as integers with 8 implied
decimals. The integer is computed in Decimal from the float's shortest
repr, so 65000.12345678 encodes to exactly 6500012345678 rather than
whatever ``65000.12345678 * 1e8`` rounds to in binary floating point.
"""

import math
from decimal import ROUND_HALF_UP, Decimal

ORACLE_DECIMALS = 8
_SCALE = Decimal(10) ** ORACLE_DECIMALS


def to_oracle_format(price: float) -> int:
    """Encode a USD price as an 8-decimal fixed-point integer.

    Rounds half away from zero (Decimal ROUND_HALF_UP).

    Raises:
        ValueError: If the price is NaN or infinite.
    """
    if not math.isfinite(price):
        raise ValueError(f"Cannot encode non-finite price: {price!r}")
    scaled = Decimal(repr(float(price))) * _SCALE
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_oracle_format(value: int) -> float:
    """Decode an 8-decimal fixed-point integer back to a float price."""
    return float(Decimal(int(value)) / _SCALE)


def format_oracle_price(value: int) -> str:
    """Render an oracle-format integer as the decimal string used on the wire."""
    return str(int(value))
