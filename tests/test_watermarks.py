"""
Tests for the watermark update rules.
"""
import random
import pytest

from blockscan.core.entities.address import AddressRecord
from blockscan.core.entities.deposit import DepositRecord
from blockscan.core.entities.scan import ScanBatch
from blockscan.core.use_cases.watermark_updater import UpdateRule, WatermarkUpdater, select_rule

ADDR = "1BoatSLRHtKNngkdXEeobR76b53LETtpyT"
OTHER = "1dice8EMZmqKvrGE4Qc9bUFf9PX3xaYDp"


def deposit(height: int, address: str = ADDR, vout: int = 0) -> DepositRecord:
    return DepositRecord(
        tx_hash=f"{height:064x}:{vout}",
        btc_address=address,
        block_hash=f"hash-{height}",
        parent_hash=f"hash-{height - 1}",
        block_height=height,
        satoshi_amount=100_000,
        bitcoin_amount="0.00100000"
    )


def batch(height: int, *deposits: DepositRecord) -> ScanBatch:
    return ScanBatch(height=height, block_hash=f"hash-{height}", parent_hash=f"hash-{height - 1}",
                     deposits=list(deposits))


def record(lo: int, mid: int, hi: int) -> AddressRecord:
    return AddressRecord(address=ADDR, min_scan_block=lo, mid_scan_block=mid, max_scan_block=hi)


def marks(r: AddressRecord):
    return (r.min_scan_block, r.mid_scan_block, r.max_scan_block)


@pytest.mark.parametrize("state,height,expected", [
    ((0, 0, 0), 100, UpdateRule.BOOTSTRAP),
    ((0, 0, 0), 1, UpdateRule.COLLAPSED),
    ((0, 0, 0), 0, None),
    ((0, 100, 100), 1, UpdateRule.EXTEND_LOW),
    ((0, 100, 100), 101, UpdateRule.EXTEND_HIGH),
    ((5, 5, 5), 6, UpdateRule.COLLAPSED),
    ((0, 100, 100), 50, None),
    ((5, 5, 5), 8, None),
])
def test_select_rule(state, height, expected):
    assert select_rule(record(*state), height) == expected


def test_bootstrap_from_fresh_address():
    r = AddressRecord.new(ADDR)
    WatermarkUpdater.apply([r], batch(100, deposit(100)))

    assert marks(r) == (0, 100, 100)
    assert r.txs == [deposit(100)]


def test_collapsed_watermarks_advance_together():
    r = record(5, 5, 5)
    WatermarkUpdater.apply([r], batch(6, deposit(6)))

    assert marks(r) == (6, 6, 6)
    assert len(r.txs) == 1


def test_extend_low_raises_mid_when_passing_it():
    r = record(3, 3, 10)
    WatermarkUpdater.apply([r], batch(4))
    assert marks(r) == (4, 4, 10)


def test_extend_low_keeps_mid_below_it():
    r = record(0, 100, 100)
    WatermarkUpdater.apply([r], batch(1, deposit(1)))
    assert marks(r) == (1, 100, 100)
    assert len(r.txs) == 1


def test_extend_high():
    r = record(0, 100, 100)
    WatermarkUpdater.apply([r], batch(101, deposit(101)))
    assert marks(r) == (0, 100, 101)


def test_non_adjacent_block_leaves_record_untouched():
    r = record(0, 100, 100)
    WatermarkUpdater.apply([r], batch(50, deposit(50)))

    assert marks(r) == (0, 100, 100)
    assert r.txs == []


def test_only_matching_address_deposits_are_stored():
    mine = AddressRecord.new(ADDR)
    theirs = AddressRecord.new(OTHER)
    WatermarkUpdater.apply([mine, theirs], batch(7, deposit(7), deposit(7, OTHER, vout=1), deposit(7, vout=2)))

    assert [d.tx_hash.split(":")[1] for d in mine.txs] == ["0", "2"]
    assert [d.btc_address for d in theirs.txs] == [OTHER]
    assert marks(mine) == marks(theirs) == (0, 7, 7)


def test_deposit_already_held_is_not_duplicated():
    r = record(5, 5, 5)
    r.txs.append(deposit(6))
    WatermarkUpdater.apply([r], batch(6, deposit(6)))

    assert marks(r) == (6, 6, 6)
    assert len(r.txs) == 1


def test_min_never_passes_max_from_fresh_records():
    rng = random.Random(1234)
    records = [AddressRecord(address=f"addr{i}") for i in range(5)]

    for _ in range(2000):
        height = rng.randint(0, 60)
        WatermarkUpdater.apply(records, batch(height))
        for r in records:
            assert r.min_scan_block <= r.max_scan_block


def test_address_listed_twice_in_one_output_is_stored_once():
    r = record(5, 5, 5)
    twice = deposit(6)
    WatermarkUpdater.apply([r], batch(6, twice, twice.model_copy()))

    assert marks(r) == (6, 6, 6)
    assert r.txs == [twice]
