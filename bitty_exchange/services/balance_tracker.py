"""Resolve the best-known wallet balances from a live fetch or the cached snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Mapping, Optional

from ..types import NetworkAlert, PortfolioSnapshot, TrackedPortfolio
from .amounts import normalize_amount

logger = logging.getLogger(__name__)

LiveFetch = Callable[[], Awaitable[Mapping[str, Any]]]


class MalformedBalanceResponse(ValueError):
    """Raised when a live fetch resolves with something that is not a balance pair."""


@dataclass(frozen=True)
class BalanceResolution:
    snapshot: PortfolioSnapshot
    fetch_failed: bool
    used_cache: bool = False
    error: Optional[str] = None

    @property
    def is_live(self) -> bool:
        return self.snapshot.source == "live"


def _coerce_balance(payload: Mapping[str, Any], key: str) -> float:
    value = normalize_amount(payload.get(key))
    if value is None or value < 0:
        raise MalformedBalanceResponse(f"Invalid {key} balance: {payload.get(key)!r}")
    return value


def _parse_live_balances(payload: Any) -> tuple[float, float]:
    if not isinstance(payload, Mapping):
        raise MalformedBalanceResponse(f"Expected a mapping, got {type(payload).__name__}")
    return _coerce_balance(payload, "sol"), _coerce_balance(payload, "bitty")


async def resolve_balances(
    live_fetch: LiveFetch,
    cached: Optional[TrackedPortfolio],
    now: datetime,
) -> BalanceResolution:
    """Query live balances once, falling back to ``cached`` or a zero state.

    The fetch is awaited exactly once; retries and timeouts belong to whoever
    built ``live_fetch``. A cached fallback keeps its own ``last_updated`` so
    staleness stays visible.
    """

    try:
        sol, bitty = _parse_live_balances(await live_fetch())
    except Exception as exc:  # noqa: BLE001
        logger.warning("Live balance fetch failed; using cached portfolio", exc_info=exc)
        error = str(exc) or exc.__class__.__name__
        if cached is not None:
            snapshot = PortfolioSnapshot(
                sol_balance=cached.sol_balance,
                bitty_balance=cached.bitty_balance,
                last_updated=cached.last_updated,
                source="local",
            )
        else:
            snapshot = PortfolioSnapshot(
                sol_balance=0.0,
                bitty_balance=0.0,
                last_updated=None,
                source="local",
            )
        return BalanceResolution(
            snapshot=snapshot,
            fetch_failed=True,
            used_cache=cached is not None,
            error=error,
        )

    snapshot = PortfolioSnapshot(
        sol_balance=sol,
        bitty_balance=bitty,
        last_updated=now,
        source="live",
    )
    return BalanceResolution(snapshot=snapshot, fetch_failed=False)


def tracked_from_snapshot(snapshot: PortfolioSnapshot) -> TrackedPortfolio:
    return TrackedPortfolio(
        sol_balance=snapshot.sol_balance,
        bitty_balance=snapshot.bitty_balance,
        last_updated=snapshot.last_updated,
        last_source=snapshot.source,
    )


def network_alert_for(resolution: BalanceResolution) -> Optional[NetworkAlert]:
    """Alert only when the live fetch actually failed, not on a first run without cache."""

    if not resolution.fetch_failed:
        return None
    if resolution.used_cache:
        message = "Live balance unavailable, showing cached data."
    else:
        message = "Unable to load wallet balances and no cached balances are available yet."
    return NetworkAlert(
        id="portfolio-error",
        title="Wallet balances",
        message=message,
        retry_action="portfolio",
    )


__all__ = [
    "BalanceResolution",
    "LiveFetch",
    "MalformedBalanceResponse",
    "network_alert_for",
    "resolve_balances",
    "tracked_from_snapshot",
]
