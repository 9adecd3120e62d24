"""
Exchange page service.

Wires the chain, price and quote providers plus the persisted wallet state
into the pure reconciliation core, and turns provider failures into
``NetworkAlert`` notices instead of errors.

Usage:
    service = get_exchange_service()
    snapshot, alert = await service.portfolio(wallet, now=datetime.now(timezone.utc))
    entries, alerts = await service.activity(wallet)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import NATIVE_SOL_MINT, ExchangeConfig, get_exchange_config
from ..providers.base import ChainProvider, PriceProvider
from ..providers.dexscreener import DexScreenerProvider
from ..providers.jupiter import JupiterQuoteProvider
from ..providers.solana_rpc import SolanaRpcProvider
from ..types import (
    ActivityEntry,
    ApplySwapInput,
    DexData,
    DexQuoteInsights,
    NetworkAlert,
    PortfolioSnapshot,
    QuoteInsightsRequest,
    RecordTransactionRequest,
    TokenOption,
    TrackedTransactionRecord,
    TxHistoryEntry,
)
from .activity_merger import build_activity_feed
from .amounts import normalize_amount, to_raw_units
from .balance_tracker import network_alert_for, resolve_balances, tracked_from_snapshot
from .quote_reconciler import BITTY, SOL, insights_for_swap
from .state_store import ExchangeStateStore

logger = logging.getLogger(__name__)


class UnsupportedPairError(ValueError):
    """Raised when a swap pair is not SOL/BITTY."""


def token_options(config: ExchangeConfig) -> Dict[str, TokenOption]:
    return {
        SOL: TokenOption(symbol=SOL, mint=NATIVE_SOL_MINT, name="Solana", decimals=9),
        BITTY: TokenOption(symbol=BITTY, mint=config.bitty_mint, name="BITCOIN MASCOT", decimals=config.bitty_decimals),
    }


def network_status_message(loading_items: Sequence[str]) -> Optional[str]:
    """Human summary of in-flight refreshes, e.g. ``"Updating quote and balances…"``."""

    items = [item for item in loading_items if item]
    if not items:
        return None
    if len(items) == 1:
        return f"Updating {items[0]}…"
    return f"Updating {', '.join(items[:-1])} and {items[-1]}…"


@dataclass
class RefreshResult:
    snapshot: PortfolioSnapshot
    activity: List[ActivityEntry]
    dex: Optional[DexData]
    alerts: List[NetworkAlert] = field(default_factory=list)


class ExchangeService:
    def __init__(
        self,
        config: ExchangeConfig,
        *,
        chain: Optional[ChainProvider] = None,
        prices: Optional[PriceProvider] = None,
        quotes: Optional[JupiterQuoteProvider] = None,
        store: Optional[ExchangeStateStore] = None,
    ) -> None:
        self.config = config
        self.chain = chain or SolanaRpcProvider(config)
        self.prices = prices or DexScreenerProvider(config)
        self.quotes = quotes or JupiterQuoteProvider(config)
        self.store = store or ExchangeStateStore(config)
        self.tokens = token_options(config)

    @property
    def match_window(self) -> timedelta:
        return timedelta(seconds=self.config.match_window_seconds)

    async def portfolio(
        self,
        wallet: str,
        *,
        now: datetime,
    ) -> Tuple[PortfolioSnapshot, Optional[NetworkAlert]]:
        cached = await self.store.portfolio(wallet)
        resolution = await resolve_balances(lambda: self.chain.fetch_balances(wallet), cached, now)

        if resolution.is_live or resolution.used_cache:
            await self.store.set_portfolio(wallet, tracked_from_snapshot(resolution.snapshot))

        return resolution.snapshot, network_alert_for(resolution)

    async def activity(self, wallet: str) -> Tuple[List[ActivityEntry], List[NetworkAlert]]:
        alerts: List[NetworkAlert] = []
        history: List[TxHistoryEntry] = []
        try:
            history = await self.chain.fetch_signatures(wallet, self.config.tx_history_limit)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Transaction history fetch failed for %s", wallet, exc_info=exc)
            alerts.append(
                NetworkAlert(
                    id="tx-error",
                    title="Recent activity",
                    message="Unable to load recent transactions.",
                    retry_action="activity",
                )
            )

        records = await self.store.transactions(wallet)
        entries = build_activity_feed(
            history,
            records,
            self.match_window,
            limit=self.config.feed_limit,
            explorer_base=self.config.explorer_tx_base_url,
        )
        return entries, alerts

    async def dex_data(self, *, force_refresh: bool = False) -> Tuple[Optional[DexData], Optional[NetworkAlert]]:
        try:
            return await self.prices.fetch_pair_data(force_refresh=force_refresh), None
        except Exception as exc:  # noqa: BLE001
            logger.warning("DexScreener fetch failed", exc_info=exc)
            return None, NetworkAlert(
                id="dex-error",
                title="DexScreener data",
                message=str(exc) or "Unable to load DexScreener data.",
                retry_action="dex",
            )

    async def quote_insights(
        self,
        request: QuoteInsightsRequest,
    ) -> Tuple[Optional[DexQuoteInsights], Optional[float], List[NetworkAlert]]:
        """Compare a quoted output (given, or fetched from Jupiter) with the DexScreener benchmark."""

        from_token = self.tokens.get(request.from_token)
        to_token = self.tokens.get(request.to_token)
        if from_token is None or to_token is None or from_token.symbol == to_token.symbol:
            raise UnsupportedPairError(f"Unsupported pair {request.from_token}/{request.to_token}")

        alerts: List[NetworkAlert] = []
        dex, dex_alert = await self.dex_data()
        if dex_alert is not None:
            alerts.append(dex_alert)

        quoted: Optional[object] = request.quoted_output
        if quoted is None:
            try:
                quote = await self.quotes.get_quote(
                    input_mint=from_token.mint,
                    output_mint=to_token.mint,
                    amount_raw=to_raw_units(request.input_amount, from_token.decimals),
                    output_decimals=to_token.decimals,
                    slippage_bps=request.slippage_bps,
                )
                quoted = quote.out_amount
            except Exception as exc:  # noqa: BLE001
                logger.warning("Swap quote fetch failed", exc_info=exc)
                alerts.append(
                    NetworkAlert(
                        id="quote-error",
                        title="Swap quote",
                        message="Unable to fetch quote. Please try again.",
                        retry_action="quote",
                    )
                )

        quoted_output = normalize_amount(quoted, to_token.decimals)
        insights = insights_for_swap(
            from_token.symbol,
            to_token.symbol,
            request.input_amount,
            quoted,
            dex,
            output_decimals=to_token.decimals,
        )
        return insights, quoted_output, alerts

    async def refresh(self, wallet: str, *, now: datetime) -> RefreshResult:
        (snapshot, portfolio_alert), (entries, activity_alerts), (dex, dex_alert) = await asyncio.gather(
            self.portfolio(wallet, now=now),
            self.activity(wallet),
            self.dex_data(),
        )
        alerts = [alert for alert in (dex_alert, portfolio_alert) if alert is not None]
        alerts.extend(activity_alerts)
        return RefreshResult(snapshot=snapshot, activity=entries, dex=dex, alerts=alerts)

    async def record_transaction(
        self,
        wallet: str,
        request: RecordTransactionRequest,
        *,
        now: datetime,
    ) -> TrackedTransactionRecord:
        record = await self.store.record_transaction(wallet, request, now)
        if request.apply_to_portfolio and request.status != "failed":
            await self.store.apply_swap_to_portfolio(
                wallet,
                ApplySwapInput(
                    from_token=request.from_token,
                    to_token=request.to_token,
                    from_amount=request.from_amount,
                    to_amount=request.to_amount,
                ),
                now,
            )
        logger.info("Recorded %s swap %s for %s", record.status, record.id, wallet)
        return record


# Singleton instance
_exchange_service: Optional[ExchangeService] = None


def get_exchange_service() -> ExchangeService:
    """Get the singleton exchange service."""
    global _exchange_service
    if _exchange_service is None:
        _exchange_service = ExchangeService(get_exchange_config())
    return _exchange_service


__all__ = [
    "ExchangeService",
    "RefreshResult",
    "UnsupportedPairError",
    "get_exchange_service",
    "network_status_message",
    "token_options",
]
