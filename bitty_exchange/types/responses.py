from typing import List, Optional

from pydantic import Field

from .activity import ActivityEntry, TrackedTransactionRecord
from .alerts import NetworkAlert
from .base import FrozenModel
from .portfolio import PortfolioSnapshot
from .quote import DexData, DexQuoteInsights


class PortfolioResponse(FrozenModel):
    snapshot: PortfolioSnapshot = Field(description="Best-known balances")
    alert: Optional[NetworkAlert] = Field(default=None, description="Set when live balances were unavailable")


class ActivityResponse(FrozenModel):
    entries: List[ActivityEntry] = Field(default_factory=list, description="Newest-first activity feed")
    alerts: List[NetworkAlert] = Field(default_factory=list, description="Degraded-mode notices")


class DexDataResponse(FrozenModel):
    dex: Optional[DexData] = Field(default=None, description="Latest DexScreener pair observation")
    alert: Optional[NetworkAlert] = Field(default=None, description="Set when DexScreener was unavailable")


class QuoteInsightsResponse(FrozenModel):
    insights: Optional[DexQuoteInsights] = Field(default=None, description="Quote vs market comparison")
    quoted_output: Optional[float] = Field(default=None, description="Quoted output in UI units")
    alerts: List[NetworkAlert] = Field(default_factory=list, description="Degraded-mode notices")


class TransactionsResponse(FrozenModel):
    transactions: List[TrackedTransactionRecord] = Field(default_factory=list)
