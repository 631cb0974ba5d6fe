"""
Exceptions raised by the coverage engine and its collaborators.

Nothing here is retried automatically; callers decide whether to restart.
"""
from typing import Optional


class ScanError(Exception):
    """Base class for every blockscan failure."""


class ReaderError(ScanError):
    """The ledger reader could not resolve a block hash or fetch a block."""

    def __init__(self, message: str, height: Optional[int] = None, block_hash: Optional[str] = None):
        super().__init__(message)
        self.height = height
        self.block_hash = block_hash


class ConversionError(ScanError):
    """A display-unit amount could not be turned into whole satoshis."""


class RangeValidationError(ScanError):
    """Requested block range is negative or inverted."""


class PersistenceError(ScanError):
    """Wallet document missing, malformed or not writable."""

    def __init__(self, message: str, path: Optional[str] = None, missing: bool = False):
        super().__init__(message)
        self.path = path
        self.missing = missing


class EmptyWalletError(ScanError):
    """A block selection strategy was asked to choose from no addresses."""
