from abc import ABC, abstractmethod

from blockscan.core.entities.block import Block


class ILedgerReader(ABC):
    @abstractmethod
    async def resolve_block_hash(self, height: int) -> str:
        """
        Returns the hash of the block at `height` on the node's best chain.
        Raises ReaderError when the height is unknown or the node fails.
        """
        pass

    @abstractmethod
    async def fetch_block(self, block_hash: str) -> Block:
        """
        Returns the block with its transactions and outputs.
        Raises ReaderError on node failure, ConversionError on a bad amount.
        """
        pass

    async def aclose(self) -> None:
        pass
