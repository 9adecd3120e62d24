from datetime import datetime, timedelta, timezone

from bitty_exchange.services.activity_merger import (
    build_activity_feed,
    entry_from_record,
    entry_from_tx,
    merge,
    semantic_label,
)
from bitty_exchange.types import ActivityEntry, TrackedTransactionRecord, TxHistoryEntry

BASE = 1_714_564_800  # 2024-05-01T12:00:00Z


def _tx(signature, block_time, err=None, slot=1):
    return TxHistoryEntry(signature=signature, slot=slot, block_time=block_time, err=err)


def _local(entry_id, ts_seconds, *, label="Swap submitted", status="pending", signature=None):
    return ActivityEntry(
        id=entry_id,
        timestamp=ts_seconds * 1000 if ts_seconds is not None else None,
        label=label,
        detail="1 SOL → 100 BITTY",
        status=status,
        source="local",
        signature=signature,
    )


def test_semantic_label_strips_status_and_local_marker():
    assert semantic_label("Swap submitted") == "swap"
    assert semantic_label("Swap confirmed") == "swap"
    assert semantic_label("Swap failed (local)") == "swap"
    assert semantic_label("Stake confirmed") == "stake"


def test_entry_from_tx_maps_error_and_link():
    ok = entry_from_tx(_tx("sigA", BASE))
    failed = entry_from_tx(_tx("sigB", None, err='{"InstructionError":[0,"Custom"]}'))

    assert ok.id == "chain-sigA"
    assert ok.status == "success"
    assert ok.label == "Swap confirmed"
    assert ok.timestamp == BASE * 1000
    assert ok.link == "https://solscan.io/tx/sigA"
    assert failed.status == "error"
    assert failed.label == "Swap failed"
    assert failed.timestamp is None


def test_entry_from_record_labels_by_status():
    created = datetime.fromtimestamp(BASE, tz=timezone.utc)
    record = TrackedTransactionRecord(
        id="r1", created_at=created, from_amount=1, to_amount=1500, status="submitted", signature="sigX"
    )

    entry = entry_from_record(record)

    assert entry.id == "local-r1"
    assert entry.label == "Swap submitted"
    assert entry.status == "pending"
    assert entry.timestamp == BASE * 1000
    assert entry.detail == "1 SOL → 1,500 BITTY"
    assert entry.link == "https://solscan.io/tx/sigX"

    failed = entry_from_record(record.model_copy(update={"status": "failed", "signature": None}))
    assert (failed.label, failed.status, failed.link) == ("Swap failed (local)", "error", None)

    simulated = entry_from_record(record.model_copy(update={"status": "simulated"}))
    assert (simulated.label, simulated.status) == ("Swap simulated", "success")


def test_signature_match_drops_local_entry():
    merged = merge([_tx("sig1", BASE + 30)], [_local("local-1", BASE, signature="sig1")])

    assert [entry.id for entry in merged] == ["chain-sig1"]


def test_signature_match_ignores_the_time_window():
    merged = merge(
        [_tx("sig1", BASE + 86_400)],
        [_local("local-1", BASE, signature="sig1")],
        timedelta(seconds=60),
    )

    assert [entry.id for entry in merged] == ["chain-sig1"]


def test_mismatched_signature_is_never_matched_by_proximity():
    merged = merge([_tx("sig1", BASE + 5)], [_local("local-1", BASE, signature="other")])

    assert {entry.id for entry in merged} == {"chain-sig1", "local-1"}


def test_proximity_match_within_window():
    merged = merge([_tx("sig1", BASE + 120)], [_local("local-1", BASE)], timedelta(minutes=10))

    assert [entry.id for entry in merged] == ["chain-sig1"]


def test_proximity_outside_window_keeps_both():
    merged = merge([_tx("sig1", BASE + 3600)], [_local("local-1", BASE)], timedelta(minutes=10))

    assert [entry.id for entry in merged] == ["chain-sig1", "local-1"]


def test_proximity_requires_pending_status():
    merged = merge(
        [_tx("sig1", BASE + 10)],
        [_local("local-1", BASE, label="Swap simulated", status="success")],
    )

    assert len(merged) == 2


def test_proximity_requires_matching_label():
    merged = merge([_tx("sig1", BASE + 10)], [_local("local-1", BASE, label="Stake submitted")])

    assert len(merged) == 2


def test_one_chain_entry_confirms_only_the_closest_local_entry():
    merged = merge(
        [_tx("sig1", BASE + 100)],
        [_local("local-far", BASE), _local("local-near", BASE + 90)],
    )

    assert [entry.id for entry in merged] == ["chain-sig1", "local-far"]


def test_proximity_tie_prefers_earlier_local_entry():
    merged = merge(
        [_tx("sig1", BASE + 100)],
        [_local("local-a", BASE + 50), _local("local-b", BASE + 150)],
    )

    assert {entry.id for entry in merged} == {"chain-sig1", "local-b"}


def test_ordering_newest_first_with_undated_entries_last():
    merged = merge(
        [_tx("old", BASE), _tx("pending", None), _tx("new", BASE + 7200)],
        [_local("local-mid", BASE + 3600, label="Swap simulated", status="success")],
    )

    assert [entry.id for entry in merged] == ["chain-new", "local-mid", "chain-old", "chain-pending"]


def test_duplicate_signatures_and_ids_are_collapsed():
    merged = merge(
        [_tx("sig1", BASE), _tx("sig1", BASE)],
        [
            _local("local-1", BASE - 4000, label="Swap simulated", status="success"),
            _local("local-1", BASE - 4000, label="Swap simulated", status="success"),
        ],
    )

    assert [entry.id for entry in merged] == ["chain-sig1", "local-1"]


def test_merge_is_idempotent():
    onchain = [_tx("sig1", BASE + 60), _tx("sig2", BASE + 5000), _tx("sig3", None)]
    local = [
        _local("local-1", BASE),
        _local("local-2", BASE + 4000, signature="sig2"),
        _local("local-3", BASE + 20_000, label="Swap simulated", status="success"),
        _local("local-4", BASE + 30),
    ]

    once = merge(onchain, local)
    twice = merge(onchain, once)

    assert once == twice


def test_merge_without_chain_history_returns_local_sorted():
    merged = merge([], [_local("a", BASE), _local("b", BASE + 10), _local("c", None)])

    assert [entry.id for entry in merged] == ["b", "a", "c"]


def test_build_activity_feed_limits_entries():
    onchain = [_tx(f"sig{i}", BASE + i * 1000) for i in range(8)]
    records = [
        TrackedTransactionRecord(
            id="r1",
            created_at=datetime.fromtimestamp(BASE + 100_000, tz=timezone.utc),
            status="simulated",
        )
    ]

    feed = build_activity_feed(onchain, records, limit=6)

    assert len(feed) == 6
    assert feed[0].id == "local-r1"
    assert feed[1].id == "chain-sig7"


def test_build_activity_feed_uses_explorer_base():
    feed = build_activity_feed([_tx("sig1", BASE)], [], explorer_base="https://explorer.example/tx/")

    assert feed[0].link == "https://explorer.example/tx/sig1"
