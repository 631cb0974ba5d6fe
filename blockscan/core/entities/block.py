from pydantic import BaseModel, Field
from decimal import Decimal
from typing import List, Optional


class TxOutput(BaseModel):
    amount: Decimal  # display unit, parsed without going through float
    addresses: List[str] = Field(default_factory=list)


class BlockTransaction(BaseModel):
    txid: str
    outputs: List[TxOutput] = Field(default_factory=list)


class Block(BaseModel):
    """
    Ledger block as returned by a reader, reduced to what scanning needs.
    """
    hash: str
    parent_hash: str = ""
    height: Optional[int] = None
    transactions: List[BlockTransaction] = Field(default_factory=list)
