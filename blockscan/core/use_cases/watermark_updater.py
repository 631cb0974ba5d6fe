from enum import Enum
from typing import Callable, List, Optional, Tuple

from blockscan.core.entities.address import AddressRecord
from blockscan.core.entities.scan import ScanBatch
from blockscan.core.use_cases.deposit_matcher import find_new_deposits


class UpdateRule(str, Enum):
    BOOTSTRAP = "bootstrap"        # never scanned, jump both high marks to b
    EXTEND_LOW = "extend_low"      # low edge is right below b
    EXTEND_HIGH = "extend_high"    # high edge is right below b
    COLLAPSED = "collapsed"        # all three marks equal and right below b


def _bootstrap(r: AddressRecord, b: int) -> bool:
    return r.max_scan_block == 0 and b > 1


def _extend_low(r: AddressRecord, b: int) -> bool:
    return r.min_scan_block < r.max_scan_block and r.min_scan_block == b - 1


def _extend_high(r: AddressRecord, b: int) -> bool:
    return r.max_scan_block > r.min_scan_block and r.max_scan_block == b - 1


def _collapsed(r: AddressRecord, b: int) -> bool:
    return (
        r.min_scan_block == r.mid_scan_block == r.max_scan_block
        and r.max_scan_block == b - 1
    )


# Evaluated in order, first match wins.
RULES: Tuple[Tuple[UpdateRule, Callable[[AddressRecord, int], bool]], ...] = (
    (UpdateRule.BOOTSTRAP, _bootstrap),
    (UpdateRule.EXTEND_LOW, _extend_low),
    (UpdateRule.EXTEND_HIGH, _extend_high),
    (UpdateRule.COLLAPSED, _collapsed),
)


def select_rule(record: AddressRecord, height: int) -> Optional[UpdateRule]:
    for rule, guard in RULES:
        if guard(record, height):
            return rule
    return None


class WatermarkUpdater:
    @staticmethod
    def apply(records: List[AddressRecord], batch: ScanBatch) -> List[AddressRecord]:
        """
        Folds one scanned block into every record, in place.

        A record whose coverage isn't adjacent to the block is left alone;
        it will pick the block up once one of its edges reaches it.
        """
        b = batch.height

        for record in records:
            rule = select_rule(record, b)
            if rule is None:
                continue

            record.txs.extend(find_new_deposits(batch, record))

            if rule is UpdateRule.BOOTSTRAP:
                record.max_scan_block = b
                record.mid_scan_block = b
            elif rule is UpdateRule.EXTEND_LOW:
                record.min_scan_block = b
                if record.min_scan_block > record.mid_scan_block:
                    record.mid_scan_block = record.min_scan_block
            elif rule is UpdateRule.EXTEND_HIGH:
                record.max_scan_block = b
            elif rule is UpdateRule.COLLAPSED:
                record.min_scan_block = b
                record.mid_scan_block = b
                record.max_scan_block = b

        return records
