"""
DexScreener pair data provider.

Endpoints (tried in order, first one yielding a pair wins):
  - GET {base}/latest/dex/pairs/solana/{pairAddress}   (when a pair is configured)
  - GET {base}/latest/dex/tokens/{mint}

Pairs are cached in memory for ``dex_cache_ttl_seconds``.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..config import ExchangeConfig
from ..services.amounts import normalize_amount
from ..types import DexData
from .base import PriceProvider

logger = logging.getLogger(__name__)


class DexScreenerError(Exception):
    """Failed to get pair data from DexScreener."""
    pass


def _symbol(token: Any) -> Optional[str]:
    if not isinstance(token, dict):
        return None
    return token.get("symbol") or token.get("name")


def parse_pair(pair: Dict[str, Any]) -> DexData:
    """Map a DexScreener pair payload to :class:`DexData`; unusable numbers become ``None``."""

    volume = pair.get("volume") if isinstance(pair.get("volume"), dict) else {}
    liquidity = pair.get("liquidity") if isinstance(pair.get("liquidity"), dict) else {}
    price_change = pair.get("priceChange") if isinstance(pair.get("priceChange"), dict) else {}

    volume_raw = volume.get("h24")
    if volume_raw is None:
        volume_raw = pair.get("volume24h")

    return DexData(
        price_usd=normalize_amount(pair.get("priceUsd")),
        price_native=normalize_amount(pair.get("priceNative")),
        price_change_24h=normalize_amount(price_change.get("h24")),
        volume_24h=normalize_amount(volume_raw),
        liquidity_usd=normalize_amount(liquidity.get("usd")),
        pair_address=pair.get("pairAddress"),
        pair_url=pair.get("url"),
        dex_id=pair.get("dexId"),
        base_token_symbol=_symbol(pair.get("baseToken")),
        quote_token_symbol=_symbol(pair.get("quoteToken")),
    )


def select_pair(pairs: List[Any], mint: str) -> Optional[Dict[str, Any]]:
    """Prefer the pair that trades ``mint`` on either side, else the first pair."""

    candidates = [pair for pair in pairs if isinstance(pair, dict)]
    for pair in candidates:
        sides = (pair.get("baseToken"), pair.get("quoteToken"))
        if any(isinstance(side, dict) and side.get("address") == mint for side in sides):
            return pair
    return candidates[0] if candidates else None


class DexScreenerProvider(PriceProvider):
    """Latest BITTY/SOL pair observation from DexScreener. No API key required."""

    name = "dexscreener"

    def __init__(self, config: ExchangeConfig) -> None:
        self.base_url = config.dexscreener_base_url.rstrip("/")
        self.mint = config.bitty_mint
        self.pair_address = config.dex_pair
        self.timeout_s = config.timeout_s
        self._ttl = config.dex_cache_ttl_seconds
        self._cache: Optional[Tuple[float, DexData]] = None

    async def ready(self) -> bool:
        return bool(self.base_url and self.mint)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "DexScreener not configured"}
        status: Dict[str, Any] = {"status": "configured"}
        if self._cache is not None:
            status["cache_age_s"] = round(time.time() - self._cache[0], 1)
        return status

    def endpoints(self) -> List[str]:
        urls = []
        if self.pair_address:
            urls.append(f"{self.base_url}/latest/dex/pairs/solana/{self.pair_address}")
        urls.append(f"{self.base_url}/latest/dex/tokens/{self.mint}")
        return urls

    def _cache_get(self) -> Optional[DexData]:
        if self._cache is None:
            return None
        fetched_at, data = self._cache
        if (time.time() - fetched_at) > self._ttl:
            self._cache = None
            return None
        return data

    async def fetch_pair_data(self, *, force_refresh: bool = False) -> DexData:
        if not force_refresh:
            cached = self._cache_get()
            if cached is not None:
                return cached

        last_error: Optional[Exception] = None
        matching: Optional[Dict[str, Any]] = None

        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            for endpoint in self.endpoints():
                try:
                    response = await client.get(endpoint)
                    response.raise_for_status()
                    payload = response.json()
                except httpx.HTTPStatusError as exc:
                    last_error = DexScreenerError(
                        f"DexScreener responded with status {exc.response.status_code}"
                    )
                    continue
                except (httpx.HTTPError, ValueError) as exc:
                    logger.debug("DexScreener endpoint %s failed", endpoint, exc_info=exc)
                    last_error = exc
                    continue

                pairs = payload.get("pairs") if isinstance(payload, dict) else None
                matching = select_pair(pairs or [], self.mint)
                if matching is not None:
                    break
                last_error = DexScreenerError("DexScreener returned no matching pairs.")

        if matching is None:
            if isinstance(last_error, DexScreenerError):
                raise last_error
            if last_error is not None:
                raise DexScreenerError(str(last_error) or "DexScreener request failed") from last_error
            raise DexScreenerError("DexScreener did not return data for BITTY yet.")

        data = parse_pair(matching)
        self._cache = (time.time(), data)
        return data

    def clear_cache(self) -> None:
        self._cache = None


__all__ = ["DexScreenerError", "DexScreenerProvider", "parse_pair", "select_pair"]
