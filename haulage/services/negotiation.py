"""Profitability check of a client's offer against the break-even price."""
import logging
import math
import re
from typing import Optional, Union

from haulage.schemas.pricing import NegotiationResult

logger = logging.getLogger(__name__)

_NON_NUMERIC = re.compile(r"[,\s₦]|NGN", re.IGNORECASE)


def parse_offer_price(raw: Union[float, int, str, None]) -> Optional[float]:
    """Read a user-entered offer such as ``"₦24,000"``.

    Empty input means no offer has been made. Anything unreadable or negative
    is treated as an offer of 0.
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        cleaned = _NON_NUMERIC.sub("", raw)
        if not cleaned:
            return None if not raw.strip() else 0.0
        try:
            value = float(cleaned)
        except ValueError:
            logger.debug(f"Unreadable offer price {raw!r}, treating as 0")
            return 0.0
    else:
        value = float(raw)

    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def evaluate(offer_price: float, break_even_price: float) -> NegotiationResult:
    difference = offer_price - break_even_price
    if break_even_price == 0:
        margin_percentage = 0.0
    else:
        margin_percentage = (difference / break_even_price) * 100

    return NegotiationResult(
        difference=abs(difference),
        is_profitable=difference >= 0,
        margin_percentage=margin_percentage,
    )
