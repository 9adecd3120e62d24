"""Per-wallet persisted exchange state: tracked portfolio and local swap records.

State is stored as one versioned JSON document per wallet, in Redis when a
``redis_url`` is configured and in process memory otherwise. Payloads are
sanitized on load so a corrupt record never breaks the whole wallet.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import redis.asyncio as redis
from pydantic import BaseModel, Field

from ..config import ExchangeConfig
from ..types import (
    ApplySwapInput,
    RecordTransactionInput,
    TrackedPortfolio,
    TrackedTransactionRecord,
)

logger = logging.getLogger(__name__)

STORE_VERSION = 1

SOL = "SOL"
BITTY = "BITTY"


class WalletState(BaseModel):
    version: int = STORE_VERSION
    portfolio: Optional[TrackedPortfolio] = None
    transactions: List[TrackedTransactionRecord] = Field(default_factory=list)


def _sanitize_number(value: Any) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


def _parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO timestamp; naive values are taken as UTC."""

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _sanitize_portfolio(candidate: Any) -> Optional[TrackedPortfolio]:
    if not isinstance(candidate, dict):
        return None
    last_source = candidate.get("lastSource")
    return TrackedPortfolio(
        sol_balance=max(_sanitize_number(candidate.get("solBalance")), 0.0),
        bitty_balance=max(_sanitize_number(candidate.get("bittyBalance")), 0.0),
        last_updated=_parse_datetime(candidate.get("lastUpdated")),
        last_source="live" if last_source == "live" else "local",
    )


def _sanitize_transaction(candidate: Any) -> Optional[TrackedTransactionRecord]:
    if not isinstance(candidate, dict):
        return None
    record_id = candidate.get("id")
    created_at = _parse_datetime(candidate.get("createdAt"))
    if not isinstance(record_id, str) or created_at is None:
        return None

    status = candidate.get("status")
    if status not in ("submitted", "failed"):
        status = "simulated"

    def _optional_str(key: str) -> Optional[str]:
        value = candidate.get(key)
        return value if isinstance(value, str) else None

    return TrackedTransactionRecord(
        id=record_id,
        created_at=created_at,
        wallet=_optional_str("wallet"),
        from_token=_optional_str("fromToken") or SOL,
        to_token=_optional_str("toToken") or BITTY,
        from_amount=_sanitize_number(candidate.get("fromAmount")),
        to_amount=_sanitize_number(candidate.get("toAmount")),
        slippage_bps=_sanitize_number(candidate.get("slippageBps")),
        status=status,
        signature=_optional_str("signature"),
        note=_optional_str("note"),
    )


def sanitize_state(raw: Any, max_transactions: int) -> WalletState:
    if not isinstance(raw, dict):
        return WalletState()
    transactions_raw = raw.get("transactions")
    transactions: List[TrackedTransactionRecord] = []
    if isinstance(transactions_raw, list):
        for item in transactions_raw:
            record = _sanitize_transaction(item)
            if record is not None:
                transactions.append(record)
    return WalletState(
        portfolio=_sanitize_portfolio(raw.get("portfolio")),
        transactions=transactions[:max_transactions],
    )


def _serialize(state: WalletState) -> str:
    payload = {
        "version": STORE_VERSION,
        "portfolio": state.portfolio.model_dump(mode="json", by_alias=True) if state.portfolio else None,
        "transactions": [record.model_dump(mode="json", by_alias=True) for record in state.transactions],
    }
    return json.dumps(payload)


class ExchangeStateStore:
    """Load and mutate persisted wallet state.

    Usage:
        store = ExchangeStateStore(get_exchange_config())
        await store.set_portfolio(wallet, tracked)
        records = await store.transactions(wallet)
    """

    def __init__(self, config: ExchangeConfig, client: Optional[Any] = None) -> None:
        self._prefix = config.storage_prefix
        self._max_transactions = config.max_tracked_transactions
        self._local: Dict[str, str] = {}
        self._lock = asyncio.Lock()
        self._client = client
        if self._client is None and config.redis_url:
            try:
                self._client = redis.from_url(config.redis_url, encoding="utf-8", decode_responses=True)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Failed to initialize Redis client", exc_info=exc)
                self._client = None

    @property
    def redis_enabled(self) -> bool:
        return self._client is not None

    def storage_key(self, wallet: Optional[str]) -> str:
        return f"{self._prefix}:{wallet or 'guest'}"

    async def _read(self, key: str) -> Optional[str]:
        if self._client is not None:
            return await self._client.get(key)
        return self._local.get(key)

    async def _write(self, key: str, payload: str) -> None:
        if self._client is not None:
            await self._client.set(key, payload)
            return
        self._local[key] = payload

    async def _delete(self, key: str) -> None:
        if self._client is not None:
            await self._client.delete(key)
            return
        self._local.pop(key, None)

    async def _load_unlocked(self, wallet: Optional[str]) -> WalletState:
        raw = await self._read(self.storage_key(wallet))
        if not raw:
            return WalletState()
        try:
            decoded = json.loads(raw)
        except ValueError as exc:
            logger.warning("Discarding unreadable exchange state for %s", wallet, exc_info=exc)
            return WalletState()
        return sanitize_state(decoded, self._max_transactions)

    async def load(self, wallet: Optional[str]) -> WalletState:
        async with self._lock:
            return await self._load_unlocked(wallet)

    async def portfolio(self, wallet: Optional[str]) -> Optional[TrackedPortfolio]:
        return (await self.load(wallet)).portfolio

    async def transactions(self, wallet: Optional[str]) -> List[TrackedTransactionRecord]:
        """Tracked records, newest first."""

        state = await self.load(wallet)
        return sorted(state.transactions, key=lambda record: record.created_at, reverse=True)

    async def set_portfolio(self, wallet: Optional[str], portfolio: Optional[TrackedPortfolio]) -> None:
        async with self._lock:
            state = await self._load_unlocked(wallet)
            state.portfolio = portfolio
            await self._write(self.storage_key(wallet), _serialize(state))

    async def record_transaction(
        self,
        wallet: Optional[str],
        entry: RecordTransactionInput,
        now: datetime,
    ) -> TrackedTransactionRecord:
        record = TrackedTransactionRecord(
            id=str(uuid.uuid4()),
            created_at=now,
            wallet=wallet,
            from_token=entry.from_token,
            to_token=entry.to_token,
            from_amount=_sanitize_number(entry.from_amount),
            to_amount=_sanitize_number(entry.to_amount),
            slippage_bps=_sanitize_number(entry.slippage_bps),
            status=entry.status,
            signature=entry.signature,
            note=entry.note,
        )
        async with self._lock:
            state = await self._load_unlocked(wallet)
            state.transactions = [record, *state.transactions][: self._max_transactions]
            await self._write(self.storage_key(wallet), _serialize(state))
        return record

    async def apply_swap_to_portfolio(
        self,
        wallet: Optional[str],
        swap: ApplySwapInput,
        now: datetime,
    ) -> TrackedPortfolio:
        """Optimistically move balances for a swap; decreases are floored at zero."""

        from_amount = _sanitize_number(swap.from_amount)
        to_amount = _sanitize_number(swap.to_amount)

        async with self._lock:
            state = await self._load_unlocked(wallet)
            base = state.portfolio or TrackedPortfolio(sol_balance=0.0, bitty_balance=0.0)
            balances = {SOL: base.sol_balance, BITTY: base.bitty_balance}

            if swap.from_token in balances:
                balances[swap.from_token] = max(balances[swap.from_token] - from_amount, 0.0)
            if swap.to_token in balances:
                balances[swap.to_token] = max(balances[swap.to_token] + to_amount, 0.0)

            updated = TrackedPortfolio(
                sol_balance=balances[SOL],
                bitty_balance=balances[BITTY],
                last_updated=now,
                last_source="local",
            )
            state.portfolio = updated
            await self._write(self.storage_key(wallet), _serialize(state))
        return updated

    async def clear_transactions(self, wallet: Optional[str]) -> None:
        async with self._lock:
            state = await self._load_unlocked(wallet)
            state.transactions = []
            await self._write(self.storage_key(wallet), _serialize(state))

    async def reset(self, wallet: Optional[str]) -> None:
        async with self._lock:
            await self._delete(self.storage_key(wallet))


__all__ = ["ExchangeStateStore", "STORE_VERSION", "WalletState", "sanitize_state"]
