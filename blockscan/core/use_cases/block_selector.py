"""
Next-block selection over the tracked addresses.

Every function is a read-only query returning `chosen watermark + 1`;
nothing advances until that block has actually been scanned.
"""
from typing import Callable, Dict, List

from blockscan.core.entities.address import AddressRecord
from blockscan.core.errors import EmptyWalletError


def _require_addresses(records: List[AddressRecord]):
    if not records:
        raise EmptyWalletError("Wallet has no addresses to select a block for")


def find_min(records: List[AddressRecord]) -> int:
    """Extends the least covered low edge."""
    _require_addresses(records)
    return min(r.min_scan_block for r in records) + 1


def find_max(records: List[AddressRecord]) -> int:
    """Extends the most advanced high edge."""
    _require_addresses(records)
    return max(r.max_scan_block for r in records) + 1


def find_mid(records: List[AddressRecord]) -> int:
    _require_addresses(records)
    return max(r.mid_scan_block for r in records) + 1


def find_short(records: List[AddressRecord]) -> int:
    """
    Closes the smallest positive mid - min gap first. Ties go to the first
    address; with no positive gap anywhere, the first address's low edge.
    """
    _require_addresses(records)

    short = records[0].min_scan_block
    best_gap = None

    for r in records:
        gap = r.mid_scan_block - r.min_scan_block
        if gap > 0 and (best_gap is None or gap < best_gap):
            best_gap = gap
            short = r.min_scan_block

    return short + 1


def find_far(records: List[AddressRecord]) -> int:
    """
    Picks the low edge furthest above the global minimum that is still
    below the global mid point. Falls back to the global minimum.
    """
    lowest = find_min(records) - 1
    mid = find_mid(records) - 1

    far = lowest
    dif = 0
    for r in records:
        if r.min_scan_block < mid and r.min_scan_block - lowest > dif:
            dif = r.min_scan_block - lowest
            far = r.min_scan_block

    return far + 1


STRATEGIES: Dict[str, Callable[[List[AddressRecord]], int]] = {
    "min": find_min,
    "max": find_max,
    "short": find_short,
    "far": find_far,
}


def select_block(strategy: str, records: List[AddressRecord]) -> int:
    try:
        finder = STRATEGIES[strategy]
    except KeyError:
        raise ValueError(f"Unknown strategy '{strategy}', expected one of {sorted(STRATEGIES)}")
    return finder(records)
