"""
Tests for next-block selection.
"""
import pytest

from blockscan.core.entities.address import AddressRecord
from blockscan.core.errors import EmptyWalletError
from blockscan.core.use_cases.block_selector import (
    find_far, find_max, find_mid, find_min, find_short, select_block
)


def rec(name: str, lo: int, mid: int, hi: int) -> AddressRecord:
    return AddressRecord(address=name, min_scan_block=lo, mid_scan_block=mid, max_scan_block=hi)


def test_min_max_mid():
    records = [rec("a", 3, 9, 20), rec("b", 1, 4, 50), rec("c", 7, 12, 12)]

    assert find_min(records) == 2
    assert find_max(records) == 51
    assert find_mid(records) == 13


def test_short_picks_smallest_positive_gap():
    records = [rec("a", 0, 5, 5), rec("b", 8, 10, 10), rec("c", 4, 4, 9)]
    assert find_short(records) == 9


def test_short_tie_goes_to_first_address():
    a = rec("a", 2, 5, 5)
    b = rec("b", 10, 13, 13)

    assert find_short([rec("z", 0, 0, 0), a, b]) == 3
    assert find_short([b, a]) == 11


def test_short_without_gaps_falls_back_to_first_address():
    records = [rec("a", 7, 7, 7), rec("b", 2, 2, 2)]
    assert find_short(records) == 8


def test_far_prefers_low_edge_furthest_above_minimum():
    a = rec("a", 2, 10, 10)
    b = rec("b", 5, 10, 10)

    assert find_min([a, b]) == 3
    assert find_far([a, b]) == 6


def test_far_ignores_low_edges_at_or_above_mid():
    records = [rec("a", 2, 4, 20), rec("b", 10, 10, 20)]
    assert find_far(records) == 3


def test_far_falls_back_to_minimum():
    records = [rec("a", 4, 4, 4), rec("b", 4, 4, 4)]
    assert find_far(records) == 5


@pytest.mark.parametrize("finder", [find_min, find_max, find_mid, find_short, find_far])
def test_empty_wallet_is_rejected(finder):
    with pytest.raises(EmptyWalletError):
        finder([])


def test_select_block_dispatch():
    records = [rec("a", 1, 3, 8)]
    assert select_block("min", records) == 2
    assert select_block("max", records) == 9
    assert select_block("short", records) == 2
    assert select_block("far", records) == 2

    with pytest.raises(ValueError):
        select_block("mid", records)
