import hashlib
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from blockscan.core.interfaces.ledger import ILedgerReader
from blockscan.core.entities.block import Block, BlockTransaction, TxOutput
from blockscan.core.errors import ReaderError

# (txid, [(amount, [addresses]), ...])
MockTx = Tuple[str, List[Tuple[Union[str, Decimal], List[str]]]]


def mock_block_hash(height: int) -> str:
    return hashlib.sha256(f"block-{height}".encode()).hexdigest()


class InMemoryLedger(ILedgerReader):
    """
    Ledger reader backed by a dict of blocks. Heights in `failing` raise
    ReaderError, as do heights that were never added.
    """

    def __init__(self):
        self.blocks: Dict[str, Block] = {}
        self.heights: Dict[int, str] = {}
        self.failing: Set[int] = set()
        self.requested: List[int] = []

    def add_block(self, height: int, txs: Optional[Iterable[MockTx]] = None) -> Block:
        block_hash = mock_block_hash(height)
        block = Block(
            hash=block_hash,
            parent_hash=mock_block_hash(height - 1) if height > 0 else "",
            height=height,
            transactions=[
                BlockTransaction(
                    txid=txid,
                    outputs=[TxOutput(amount=Decimal(str(amount)), addresses=addrs) for amount, addrs in outs]
                )
                for txid, outs in (txs or [])
            ]
        )
        self.blocks[block_hash] = block
        self.heights[height] = block_hash
        return block

    def add_empty_blocks(self, start: int, end: int):
        for height in range(start, end + 1):
            if height not in self.heights:
                self.add_block(height)

    async def resolve_block_hash(self, height: int) -> str:
        self.requested.append(height)
        if height in self.failing:
            raise ReaderError(f"Node unavailable for block {height}", height=height)
        if height not in self.heights:
            raise ReaderError(f"Block height out of range: {height}", height=height)
        return self.heights[height]

    async def fetch_block(self, block_hash: str) -> Block:
        if block_hash not in self.blocks:
            raise ReaderError(f"Block not found: {block_hash}", block_hash=block_hash)
        return self.blocks[block_hash]
