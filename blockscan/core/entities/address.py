from pydantic import BaseModel, Field, field_validator
from typing import List

from blockscan.core.entities.deposit import DepositRecord


class AddressRecord(BaseModel):
    """
    Scan coverage of one watched address.

    min/max_scan_block are the two growing edges of the scanned range,
    mid_scan_block is the highest point the low edge has caught up to.
    """
    address: str
    min_scan_block: int = 0
    mid_scan_block: int = 0
    max_scan_block: int = 0
    txs: List[DepositRecord] = Field(default_factory=list)

    @field_validator("txs", mode="before")
    @classmethod
    def _null_txs(cls, value):
        # Older wallet files store an empty history as null
        return [] if value is None else value

    @classmethod
    def new(cls, address: str) -> "AddressRecord":
        return cls(address=address)
