import random
import time
import logging
from typing import Iterable, List, Optional

from blockscan.core.interfaces.ledger import ILedgerReader
from blockscan.core.entities.address import AddressRecord
from blockscan.core.entities.scan import ScanBatch, ScanRangeResponse, UpdateInfo
from blockscan.core.errors import ScanError, RangeValidationError
from blockscan.core.use_cases.batch_builder import build_scan_batch
from blockscan.core.use_cases.block_selector import STRATEGIES, select_block
from blockscan.core.use_cases.watermark_updater import WatermarkUpdater

logger = logging.getLogger(__name__)

STRATEGY_NAMES = tuple(STRATEGIES)


def validate_range(start: int, end: int):
    if start < 0 or end < 0 or end < start:
        raise RangeValidationError(f"Bad block range [{start}, {end}]")


# --- Wallet Maintenance ---

def add_address(records: List[AddressRecord], address: str) -> bool:
    """Appends a fresh (0, 0, 0) record unless the address is already tracked."""
    if any(r.address == address for r in records):
        return False
    records.append(AddressRecord.new(address))
    return True


def add_addresses(records: List[AddressRecord], addresses: Iterable[str]) -> int:
    added = 0
    for address in addresses:
        address = address.strip()
        if address and add_address(records, address):
            added += 1
    return added


# --- Coverage Engine ---

class CoverageService:
    """
    Drives the ledger reader and folds each scanned block into the
    address records. Records are mutated in place; one block at a time.
    """

    def __init__(self, reader: ILedgerReader, rng: Optional[random.Random] = None):
        self.reader = reader
        self.rng = rng or random.Random()

    async def scan_block(self, height: int) -> ScanBatch:
        try:
            block_hash = await self.reader.resolve_block_hash(height)
            block = await self.reader.fetch_block(block_hash)
            batch = build_scan_batch(block, height)
        except ScanError as e:
            logger.error(f"Block scanning failed at {height}: {e}")
            raise

        logger.debug(f"Scanned block {height} ({batch.block_hash}): {len(batch.deposits)} outputs")
        return batch

    async def scan_range(self, records: List[AddressRecord], start: int, end: int) -> ScanRangeResponse:
        """
        Scans [start, end] inclusive in ascending order. The first failing
        block aborts the scan; blocks before it stay applied.
        """
        validate_range(start, end)

        scanned = 0
        found = 0

        for height in range(start, end + 1):
            batch = await self.scan_block(height)
            before = sum(len(r.txs) for r in records)
            WatermarkUpdater.apply(records, batch)
            found += sum(len(r.txs) for r in records) - before
            scanned += 1

        logger.info(f"Range [{start}, {end}] scanned for {len(records)} addresses, {found} new deposits")
        return ScanRangeResponse(start=start, end=end, blocks_scanned=scanned, deposits_found=found)

    async def advance(self, records: List[AddressRecord], strategy: str) -> UpdateInfo:
        start_time = time.perf_counter()
        height = select_block(strategy, records)

        batch = await self.scan_block(height)
        WatermarkUpdater.apply(records, batch)

        elapsed = time.perf_counter() - start_time
        info = UpdateInfo(type=strategy, elapsed=f"{elapsed}s", scanned_block=height)
        logger.info(f"Update {strategy}: scanned block {height} in {info.elapsed}")
        return info

    async def update_min(self, records: List[AddressRecord]) -> UpdateInfo:
        return await self.advance(records, "min")

    async def update_max(self, records: List[AddressRecord]) -> UpdateInfo:
        return await self.advance(records, "max")

    async def update_short(self, records: List[AddressRecord]) -> UpdateInfo:
        return await self.advance(records, "short")

    async def update_far(self, records: List[AddressRecord]) -> UpdateInfo:
        return await self.advance(records, "far")

    async def update_random(self, records: List[AddressRecord]) -> UpdateInfo:
        return await self.advance(records, self.rng.choice(STRATEGY_NAMES))
