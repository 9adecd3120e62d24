"""Service layer helpers"""

from .activity_merger import build_activity_feed, merge
from .amounts import (
    ConversionStrategy,
    TokenAmount,
    format_amount,
    format_currency,
    format_percent,
    normalize_amount,
)
from .balance_tracker import BalanceResolution, resolve_balances
from .quote_reconciler import insights_for_swap, reconcile

__all__ = [
    "BalanceResolution",
    "ConversionStrategy",
    "TokenAmount",
    "build_activity_feed",
    "format_amount",
    "format_currency",
    "format_percent",
    "insights_for_swap",
    "merge",
    "normalize_amount",
    "reconcile",
    "resolve_balances",
]
