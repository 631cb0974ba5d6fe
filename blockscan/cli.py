"""
Command line scanner.

Usage:
    blockscan --wallet wallet.json -n 100 -m 200
    blockscan --add 1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa --update_min
    blockscan --randomize
"""
import os
import json
import sys
import asyncio
import argparse
import logging
from typing import List, Optional

from blockscan.core.entities.scan import UpdateInfo
from blockscan.core.errors import ScanError
from blockscan.core.services import CoverageService, add_addresses, validate_range
from blockscan.infrastructure.cache.redis_service import RedisService
from blockscan.infrastructure.gateways.btcd_rpc import BtcdRpcGateway, DEFAULT_RPC_URL, DEFAULT_CERT_PATH
from blockscan.infrastructure.gateways.cached_reader import CachedLedgerReader
from blockscan.infrastructure.persistence.json_wallet import JsonWalletRepo, load_address_file

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="blockscan", description="Scan blocks for deposits to watched addresses")
    parser.add_argument("--user", default=os.getenv("BTCD_RPC_USER"), help="btcd username")
    parser.add_argument("--pass", dest="password", default=os.getenv("BTCD_RPC_PASS"), help="btcd password")
    parser.add_argument("--rpc-url", default=os.getenv("BTCD_RPC_URL", DEFAULT_RPC_URL), help="btcd RPC endpoint")
    parser.add_argument("--cert", default=os.getenv("BTCD_RPC_CERT", DEFAULT_CERT_PATH), help="btcd rpc.cert path")
    parser.add_argument("--wallet", default=os.getenv("WALLET_PATH", "wallet.json"), help="path to wallet.json file")
    parser.add_argument("-n", type=int, default=None, help="start block height")
    parser.add_argument("-m", type=int, default=None, help="finish block height (defaults to -n)")
    parser.add_argument("--add", default="", help="comma separated addresses to add to the wallet")
    parser.add_argument("--add_file", default="", help="JSON file with {\"btc_addresses\": [...]} to add")
    parser.add_argument("--update_min", action="store_true", help="scan one block past the lowest low edge")
    parser.add_argument("--update_max", action="store_true", help="scan one block past the highest high edge")
    parser.add_argument("--update_short", action="store_true", help="close the smallest mid-min gap by one block")
    parser.add_argument("--update_far", action="store_true", help="advance the low edge furthest from the minimum")
    parser.add_argument("--randomize", action="store_true", help="advance one block with a random strategy")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def format_update_info(info: UpdateInfo) -> str:
    # Tab indented, the layout existing tooling reads from this report
    return json.dumps(info.model_dump(), indent="\t")


def add_to_wallet(store: JsonWalletRepo, addresses: List[str], source: str):
    records = store.load()
    added = add_addresses(records, addresses)
    store.save(records)
    logger.info(f"Addresses from {source} added: {added} new")


async def run(args: argparse.Namespace) -> None:
    store = JsonWalletRepo(args.wallet)

    if args.add:
        add_to_wallet(store, args.add.split(","), "command line")
    if args.add_file:
        add_to_wallet(store, load_address_file(args.add_file), args.add_file)

    # No range given means no range scan, only the requested single steps
    scan_bounds = None
    if args.n is not None or args.m is not None:
        start = args.n if args.n is not None else 0
        end = args.m if args.m is not None else start
        validate_range(start, end)
        scan_bounds = (start, end)

    records = store.load()

    reader = BtcdRpcGateway(url=args.rpc_url, user=args.user, password=args.password, cert_path=args.cert)
    cache = RedisService()
    if cache.enabled:
        reader = CachedLedgerReader(reader, cache)

    service = CoverageService(reader)
    try:
        if scan_bounds:
            await service.scan_range(records, *scan_bounds)

        steps = [
            (args.update_min, service.update_min),
            (args.update_max, service.update_max),
            (args.update_short, service.update_short),
            (args.update_far, service.update_far),
            (args.randomize, service.update_random),
        ]
        for requested, step in steps:
            if requested:
                info = await step(records)
                print(format_update_info(info))
    finally:
        await reader.aclose()

    store.save(records)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        asyncio.run(run(args))
    except ScanError as e:
        logger.error(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
