from .activity import (
    ActivityEntry,
    ActivitySource,
    ActivityStatus,
    TrackedTransactionRecord,
    TrackedTransactionStatus,
    TxHistoryEntry,
)
from .alerts import NetworkAlert, RetryAction
from .portfolio import PortfolioSnapshot, Provenance, TokenOption, TrackedPortfolio
from .quote import DexData, DexQuoteInsights
from .requests import (
    ApplySwapInput,
    QuoteInsightsRequest,
    RecordTransactionInput,
    RecordTransactionRequest,
)
from .responses import (
    ActivityResponse,
    DexDataResponse,
    PortfolioResponse,
    QuoteInsightsResponse,
    TransactionsResponse,
)

__all__ = [
    "ActivityEntry",
    "ActivityResponse",
    "ActivitySource",
    "ActivityStatus",
    "ApplySwapInput",
    "DexData",
    "DexDataResponse",
    "DexQuoteInsights",
    "NetworkAlert",
    "PortfolioResponse",
    "PortfolioSnapshot",
    "Provenance",
    "QuoteInsightsRequest",
    "QuoteInsightsResponse",
    "RecordTransactionInput",
    "RecordTransactionRequest",
    "RetryAction",
    "TokenOption",
    "TrackedPortfolio",
    "TrackedTransactionRecord",
    "TrackedTransactionStatus",
    "TransactionsResponse",
    "TxHistoryEntry",
]
