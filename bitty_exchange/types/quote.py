from typing import Optional

from pydantic import Field

from .base import FrozenModel


class DexQuoteInsights(FrozenModel):
    benchmark_output: float = Field(description="Expected output implied by the DEX market price")
    quoted_output: float = Field(description="Output promised by the swap quote")
    difference: float = Field(description="quoted_output - benchmark_output")
    percent_diff: Optional[float] = Field(default=None, description="difference as a percent of the benchmark")
    usd_value: Optional[float] = Field(default=None, description="USD value of the quoted output")
    implied_price_native: Optional[float] = Field(default=None, description="Effective price realized by the quote")
    dex_price_native: float = Field(description="DEX pair price in the native token")


class DexData(FrozenModel):
    price_usd: Optional[float] = None
    price_native: Optional[float] = None
    price_change_24h: Optional[float] = None
    volume_24h: Optional[float] = None
    liquidity_usd: Optional[float] = None
    pair_address: Optional[str] = None
    pair_url: Optional[str] = None
    dex_id: Optional[str] = None
    base_token_symbol: Optional[str] = None
    quote_token_symbol: Optional[str] = None
