from typing import List

from blockscan.core.entities.address import AddressRecord
from blockscan.core.entities.deposit import DepositRecord
from blockscan.core.entities.scan import ScanBatch


def has_deposit(record: AddressRecord, deposit: DepositRecord) -> bool:
    return any(existing == deposit for existing in record.txs)


def find_new_deposits(batch: ScanBatch, record: AddressRecord) -> List[DepositRecord]:
    """
    Deposits in `batch` paying `record.address` that the record doesn't hold yet.
    Rescanning a block already folded into the record yields nothing.
    """
    # Linear in the record's history; fine while wallets stay small.
    found: List[DepositRecord] = []
    for d in batch.deposits:
        if d.btc_address != record.address or has_deposit(record, d):
            continue
        # An output may list the same address twice (bare multisig)
        if any(selected == d for selected in found):
            continue
        found.append(d)
    return found
