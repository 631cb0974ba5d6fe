import asyncio
import logging
import os
from typing import Optional

from pydantic import ValidationError

from blockscan.core.interfaces.ledger import ILedgerReader
from blockscan.core.entities.block import Block
from blockscan.infrastructure.cache.redis_service import RedisService

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_TTL = 86400


def block_ttl_from_env() -> int:
    raw = os.getenv("BLOCK_CACHE_TTL")
    if not raw:
        return DEFAULT_BLOCK_TTL
    try:
        ttl = int(raw)
    except ValueError:
        logger.warning(f"Invalid BLOCK_CACHE_TTL '{raw}', using {DEFAULT_BLOCK_TTL}s")
        return DEFAULT_BLOCK_TTL
    if ttl <= 0:
        logger.warning(f"BLOCK_CACHE_TTL must be positive, using {DEFAULT_BLOCK_TTL}s")
        return DEFAULT_BLOCK_TTL
    return ttl


class CachedLedgerReader(ILedgerReader):
    """
    Caches fetched blocks by hash. Height lookups always go to the node,
    since the block at a height changes on a reorg while a hash never does.
    """

    def __init__(self, reader: ILedgerReader, cache: RedisService, ttl_seconds: Optional[int] = None):
        self.reader = reader
        self.cache = cache
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else block_ttl_from_env()

    @staticmethod
    def cache_key(block_hash: str) -> str:
        return f"blockscan:block:{block_hash}"

    async def resolve_block_hash(self, height: int) -> str:
        return await self.reader.resolve_block_hash(height)

    async def fetch_block(self, block_hash: str) -> Block:
        key = self.cache_key(block_hash)

        # redis-py is synchronous, keep it off the event loop
        cached = await asyncio.to_thread(self.cache.get, key)
        if cached is not None:
            try:
                return Block.model_validate(cached)
            except ValidationError as e:
                logger.warning(f"Discarding corrupt cache entry {key}: {e}")
                await asyncio.to_thread(self.cache.delete, key)

        block = await self.reader.fetch_block(block_hash)
        await asyncio.to_thread(self.cache.set, key, block, self.ttl_seconds)
        return block

    async def aclose(self) -> None:
        await self.reader.aclose()
