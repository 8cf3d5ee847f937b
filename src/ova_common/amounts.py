"""Currency amount helpers.

Bet amounts are stored as NUMERIC(14, 2). Python side uses Decimal quantized
to two places; floats never enter the ledger.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated

from pydantic import PlainSerializer

AMOUNT_QUANT = Decimal("0.01")


def to_amount(value: int | float | str | Decimal) -> Decimal:
    """Coerce a request/DB value to a 2-place Decimal.

    Floats go through str() first so 0.1 stays 0.10 rather than 0.1000000000000000055.
    """
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(AMOUNT_QUANT, rounding=ROUND_HALF_UP)


# Decimal inside the app, JSON number on the wire (dump with mode="json").
AmountOut = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
