import os
import logging
from functools import lru_cache
from typing import List
from fastapi import FastAPI, Query, Depends, HTTPException
from fastapi.middleware.cors import CORSMiddleware

# --- Imports ---
from blockscan.core.interfaces.ledger import ILedgerReader
from blockscan.core.interfaces.wallet_store import IWalletStore
from blockscan.core.entities.address import AddressRecord
from blockscan.core.entities.scan import ScanRangeResponse, UpdateInfo
from blockscan.core.errors import (
    ScanError, ReaderError, ConversionError, RangeValidationError, PersistenceError, EmptyWalletError
)
from blockscan.core.services import CoverageService, STRATEGY_NAMES, add_addresses
from blockscan.core.use_cases.block_selector import select_block
from blockscan.infrastructure.cache.redis_service import RedisService
from blockscan.infrastructure.gateways.btcd_rpc import BtcdRpcGateway, DEFAULT_RPC_URL, DEFAULT_CERT_PATH
from blockscan.infrastructure.gateways.cached_reader import CachedLedgerReader
from blockscan.infrastructure.persistence.json_wallet import JsonWalletRepo

# Setup Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("BlockScan")

app = FastAPI(title="BlockScan API", version="1.0.0", description="Per-address block scan coverage tracking")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Dependency Injection ---

@lru_cache(maxsize=1)
def get_block_cache() -> RedisService:
    return RedisService()


async def get_ledger_reader():
    gateway = BtcdRpcGateway(
        url=os.getenv("BTCD_RPC_URL", DEFAULT_RPC_URL),
        user=os.getenv("BTCD_RPC_USER"),
        password=os.getenv("BTCD_RPC_PASS"),
        cert_path=os.getenv("BTCD_RPC_CERT", DEFAULT_CERT_PATH)
    )
    cache = get_block_cache()
    reader: ILedgerReader = CachedLedgerReader(gateway, cache) if cache.enabled else gateway
    try:
        yield reader
    finally:
        await reader.aclose()


def get_wallet_store() -> IWalletStore:
    return JsonWalletRepo(os.getenv("WALLET_PATH", "wallet.json"))


def _status_for(e: ScanError) -> int:
    if isinstance(e, (RangeValidationError, EmptyWalletError)):
        return 400
    if isinstance(e, PersistenceError):
        return 404 if e.missing else 500
    if isinstance(e, ConversionError):
        return 422
    if isinstance(e, ReaderError):
        return 502
    return 500


def _http_error(e: ScanError) -> HTTPException:
    status = _status_for(e)
    if status >= 500:
        logger.error(f"{type(e).__name__}: {e}")
    return HTTPException(status_code=status, detail=str(e))


def _load(store: IWalletStore) -> List[AddressRecord]:
    try:
        return store.load()
    except PersistenceError as e:
        raise _http_error(e)


def _save(store: IWalletStore, records: List[AddressRecord]):
    try:
        store.save(records)
    except PersistenceError as e:
        raise _http_error(e)

# --- Endpoints ---

@app.get("/health")
async def health():
    return {"status": "healthy", "mode": "btcd JSON-RPC via Gateway"}


@app.get("/v1/addresses", response_model=List[AddressRecord])
async def get_addresses(store: IWalletStore = Depends(get_wallet_store)):
    return _load(store)


@app.post("/v1/addresses")
async def post_addresses(
    address: str = Query(..., description="Comma separated addresses to track"),
    store: IWalletStore = Depends(get_wallet_store)
):
    """
    Adds addresses with empty coverage. Already tracked addresses are left as they are.
    """
    records = _load(store)
    added = add_addresses(records, address.split(","))
    _save(store, records)
    return {"added": added, "total": len(records)}


@app.get("/v1/next/{strategy}")
async def get_next_block(strategy: str, store: IWalletStore = Depends(get_wallet_store)):
    """
    Block the strategy would scan next. Nothing is scanned or saved.
    """
    if strategy not in STRATEGY_NAMES:
        raise HTTPException(status_code=400, detail=f"Unknown strategy '{strategy}'")

    records = _load(store)
    try:
        block = select_block(strategy, records)
    except ScanError as e:
        raise _http_error(e)
    return {"strategy": strategy, "block": block}


@app.post("/v1/scan", response_model=ScanRangeResponse)
async def scan_range(
    n: int = Query(..., description="First block height"),
    m: int = Query(..., description="Last block height, inclusive"),
    reader: ILedgerReader = Depends(get_ledger_reader),
    store: IWalletStore = Depends(get_wallet_store)
):
    """
    Scans every block in [n, m]. The wallet is saved only if the whole range succeeds.
    """
    records = _load(store)
    service = CoverageService(reader)
    try:
        result = await service.scan_range(records, n, m)
    except ScanError as e:
        raise _http_error(e)

    _save(store, records)
    return result


@app.post("/v1/update/{strategy}", response_model=UpdateInfo)
async def update(
    strategy: str,
    reader: ILedgerReader = Depends(get_ledger_reader),
    store: IWalletStore = Depends(get_wallet_store)
):
    """
    Advances coverage by one block chosen with min, max, short, far or random.
    """
    if strategy not in STRATEGY_NAMES and strategy != "random":
        raise HTTPException(status_code=400, detail=f"Unknown strategy '{strategy}'")

    records = _load(store)
    service = CoverageService(reader)
    try:
        if strategy == "random":
            info = await service.update_random(records)
        else:
            info = await service.advance(records, strategy)
    except ScanError as e:
        raise _http_error(e)

    _save(store, records)
    return info
