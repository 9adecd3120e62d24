"""Blend confirmed on-chain transactions with optimistic local swap records."""

from __future__ import annotations

from datetime import timedelta
from typing import Iterable, Optional, Sequence

from ..types import ActivityEntry, TrackedTransactionRecord, TxHistoryEntry
from .amounts import format_token_summary

DEFAULT_MATCH_WINDOW = timedelta(minutes=10)
DEFAULT_EXPLORER_TX_URL = "https://solscan.io/tx"

LOCAL_MARKER = " (local)"
_STATUS_WORDS = {"confirmed", "failed", "submitted", "simulated", "pending"}


def semantic_label(label: str) -> str:
    """Reduce a label to the action it describes, e.g. ``"Swap submitted"`` -> ``"swap"``."""

    text = label.strip()
    if text.endswith(LOCAL_MARKER):
        text = text[: -len(LOCAL_MARKER)]
    words = text.lower().split()
    while words and words[-1] in _STATUS_WORDS:
        words.pop()
    return " ".join(words)


def _tx_link(signature: str, explorer_base: str) -> str:
    return f"{explorer_base.rstrip('/')}/{signature}"


def entry_from_tx(tx: TxHistoryEntry, explorer_base: str = DEFAULT_EXPLORER_TX_URL) -> ActivityEntry:
    failed = tx.err is not None
    return ActivityEntry(
        id=f"chain-{tx.signature}",
        timestamp=tx.block_time * 1000 if tx.block_time else None,
        label="Swap failed" if failed else "Swap confirmed",
        detail=tx.signature,
        status="error" if failed else "success",
        source="onchain",
        link=_tx_link(tx.signature, explorer_base),
        signature=tx.signature,
    )


def entry_from_record(
    record: TrackedTransactionRecord,
    explorer_base: str = DEFAULT_EXPLORER_TX_URL,
) -> ActivityEntry:
    if record.status == "failed":
        label, status = "Swap failed (local)", "error"
    elif record.status == "submitted":
        label, status = "Swap submitted", "pending"
    else:
        label, status = "Swap simulated", "success"

    detail = (
        f"{format_token_summary(record.from_amount, record.from_token)}"
        f" → {format_token_summary(record.to_amount, record.to_token)}"
    )
    return ActivityEntry(
        id=f"local-{record.id}",
        timestamp=int(record.created_at.timestamp() * 1000),
        label=label,
        detail=detail,
        status=status,
        source="local",
        link=_tx_link(record.signature, explorer_base) if record.signature else None,
        signature=record.signature,
    )


def _within_window(local: ActivityEntry, chain: ActivityEntry, window_ms: float) -> bool:
    if local.timestamp is None or chain.timestamp is None:
        return False
    return abs(local.timestamp - chain.timestamp) <= window_ms


def _sort_key(entry: ActivityEntry) -> tuple[bool, int]:
    if entry.timestamp is None:
        return (True, 0)
    return (False, -entry.timestamp)


def merge(
    onchain: Iterable[TxHistoryEntry],
    local: Iterable[ActivityEntry],
    match_window: timedelta = DEFAULT_MATCH_WINDOW,
    *,
    explorer_base: str = DEFAULT_EXPLORER_TX_URL,
) -> list[ActivityEntry]:
    """Union chain history with local entries into one newest-first feed.

    A local entry that records a signature is confirmed only by the on-chain
    entry with that signature. A local entry without one is confirmed by
    proximity: still pending, same semantic label, and a timestamp within
    ``match_window`` of the block time. Each on-chain entry confirms at most
    one entry by proximity, and never one it has already confirmed in an
    earlier merge, so re-merging a merged feed is a no-op.
    """

    chain_entries: list[ActivityEntry] = []
    by_signature: dict[str, ActivityEntry] = {}
    for tx in onchain:
        if tx.signature in by_signature:
            continue
        entry = entry_from_tx(tx, explorer_base)
        by_signature[tx.signature] = entry
        chain_entries.append(entry)
    chain_ids = {entry.id for entry in chain_entries}

    local_entries = list(local)
    consumed: set[str] = {
        entry.id for entry in local_entries if entry.source == "onchain" and entry.id in chain_ids
    }

    retained: list[Optional[ActivityEntry]] = []
    awaiting_proximity: list[int] = []
    for entry in local_entries:
        if entry.source == "onchain":
            retained.append(None if entry.id in chain_ids else entry)
            continue
        if entry.signature:
            confirmed = by_signature.get(entry.signature)
            if confirmed is not None:
                consumed.add(confirmed.id)
                retained.append(None)
                continue
            retained.append(entry)
            continue
        retained.append(entry)
        if entry.status == "pending":
            awaiting_proximity.append(len(retained) - 1)

    window_ms = match_window.total_seconds() * 1000
    for chain_entry in chain_entries:
        if chain_entry.id in consumed or chain_entry.timestamp is None:
            continue
        label = semantic_label(chain_entry.label)
        best_index: Optional[int] = None
        best_distance: Optional[int] = None
        for index in awaiting_proximity:
            candidate = retained[index]
            if candidate is None or semantic_label(candidate.label) != label:
                continue
            if not _within_window(candidate, chain_entry, window_ms):
                continue
            distance = abs(candidate.timestamp - chain_entry.timestamp)
            if best_distance is None or distance < best_distance:
                best_index, best_distance = index, distance
        if best_index is not None:
            retained[best_index] = None
            consumed.add(chain_entry.id)

    combined: list[ActivityEntry] = []
    seen_ids: set[str] = set()
    for entry in [*chain_entries, *(item for item in retained if item is not None)]:
        if entry.id in seen_ids:
            continue
        seen_ids.add(entry.id)
        combined.append(entry)

    return sorted(combined, key=_sort_key)


def build_activity_feed(
    onchain: Sequence[TxHistoryEntry],
    records: Sequence[TrackedTransactionRecord],
    match_window: timedelta = DEFAULT_MATCH_WINDOW,
    *,
    limit: Optional[int] = 6,
    explorer_base: str = DEFAULT_EXPLORER_TX_URL,
) -> list[ActivityEntry]:
    local = [entry_from_record(record, explorer_base) for record in records]
    feed = merge(onchain, local, match_window, explorer_base=explorer_base)
    return feed[:limit] if limit is not None else feed


__all__ = [
    "DEFAULT_MATCH_WINDOW",
    "build_activity_feed",
    "entry_from_record",
    "entry_from_tx",
    "merge",
    "semantic_label",
]
