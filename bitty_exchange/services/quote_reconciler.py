"""Compare a swap quote against the DEX market benchmark."""

from __future__ import annotations

import math
from typing import Optional

from ..types import DexData, DexQuoteInsights
from .amounts import AmountLike, normalize_amount

SOL = "SOL"
BITTY = "BITTY"


def reconcile(
    quoted_output: float,
    benchmark_output: float,
    dex_price_native: float,
    input_amount_native: float,
    native_usd_price: Optional[float],
) -> DexQuoteInsights:
    """Build the discrepancy report for one proposed swap.

    Degenerate divisions yield ``None`` fields rather than sentinels so callers
    can tell "unknown" from "zero".
    """

    difference = quoted_output - benchmark_output
    percent_diff = difference / benchmark_output * 100 if benchmark_output != 0 else None
    implied_price_native = quoted_output / input_amount_native if input_amount_native != 0 else None
    usd_value = quoted_output * native_usd_price if native_usd_price is not None else None

    return DexQuoteInsights(
        benchmark_output=benchmark_output,
        quoted_output=quoted_output,
        difference=difference,
        percent_diff=percent_diff,
        usd_value=usd_value,
        implied_price_native=implied_price_native,
        dex_price_native=dex_price_native,
    )


def _positive(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def insights_for_swap(
    from_token: str,
    to_token: str,
    input_amount: float,
    quoted_output: AmountLike,
    dex_data: Optional[DexData],
    *,
    output_decimals: int = 6,
) -> Optional[DexQuoteInsights]:
    """Derive the benchmark for a SOL/BITTY swap from DexScreener data and reconcile.

    ``price_native`` is the BITTY price in SOL. Returns ``None`` when the
    inputs do not support a meaningful comparison.
    """

    if dex_data is None or not _positive(dex_data.price_native):
        return None
    quoted = normalize_amount(quoted_output, output_decimals)
    if not _positive(quoted) or not _positive(input_amount):
        return None

    price_native = dex_data.price_native
    price_usd = dex_data.price_usd if _positive(dex_data.price_usd) else None

    if from_token == SOL and to_token == BITTY:
        benchmark = input_amount / price_native
        output_usd_price = price_usd
    elif from_token == BITTY and to_token == SOL:
        benchmark = input_amount * price_native
        output_usd_price = price_usd / price_native if price_usd is not None else None
    else:
        return None

    if not _positive(benchmark):
        return None

    insights = reconcile(
        quoted_output=quoted,
        benchmark_output=benchmark,
        dex_price_native=price_native,
        input_amount_native=input_amount,
        native_usd_price=output_usd_price,
    )
    if from_token == SOL:
        # quote the realized price in SOL per BITTY, like dex_price_native
        insights = insights.model_copy(update={"implied_price_native": input_amount / quoted})
    return insights


__all__ = ["BITTY", "SOL", "insights_for_swap", "reconcile"]
