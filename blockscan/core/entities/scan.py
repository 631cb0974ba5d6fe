from pydantic import BaseModel, Field
from typing import List

from blockscan.core.entities.deposit import DepositRecord


class ScanBatch(BaseModel):
    """
    Every deposit produced by scanning exactly one block.
    Not persisted; folded into the address records right away.
    """
    height: int
    block_hash: str
    parent_hash: str = ""
    deposits: List[DepositRecord] = Field(default_factory=list)


class UpdateInfo(BaseModel):
    type: str  # strategy name: min, max, short, far
    elapsed: str  # e.g. "0.421s"
    scanned_block: int


class ScanRangeResponse(BaseModel):
    start: int
    end: int
    blocks_scanned: int
    deposits_found: int
