
import sys
import os
import asyncio

# Add project root to path
sys.path.append(os.getcwd())

try:
    from blockscan.core.entities.address import AddressRecord
    from blockscan.core.services import CoverageService
    from blockscan.core.use_cases.block_selector import find_far, find_short
    from blockscan.infrastructure.gateways.btcd_rpc import BtcdRpcGateway
    from blockscan.infrastructure.gateways.local_mock import InMemoryLedger
    from blockscan.api.main import app
    print("✅ All imports successful.")
except Exception as e:
    print(f"❌ Import failed: {e}")
    sys.exit(1)

# Coverage engine smoke test against an in-memory ledger
async def check_coverage():
    addr = "1BoatSLRHtKNngkdXEeobR76b53LETtpyT"
    ledger = InMemoryLedger()
    ledger.add_empty_blocks(0, 110)
    ledger.add_block(100, [("aa", [("0.5", [addr])])])

    records = [AddressRecord.new(addr)]
    service = CoverageService(ledger)

    await service.scan_range(records, 100, 100)
    r = records[0]
    if (r.min_scan_block, r.mid_scan_block, r.max_scan_block) == (0, 100, 100) and len(r.txs) == 1:
        print("✅ Bootstrap scan passed.")
    else:
        print(f"❌ Bootstrap scan failed: {r.model_dump()}")

    info = await service.update_min(records)
    print(f"✅ update_min scanned block {info.scanned_block} in {info.elapsed}")

    far = find_far([
        AddressRecord(address="a", min_scan_block=2, mid_scan_block=10, max_scan_block=10),
        AddressRecord(address="b", min_scan_block=5, mid_scan_block=10, max_scan_block=10),
    ])
    print(("✅" if far == 6 else "❌") + f" far strategy picked {far}")

    short = find_short([AddressRecord(address="a", min_scan_block=7, mid_scan_block=7, max_scan_block=7)])
    print(("✅" if short == 8 else "❌") + f" short strategy fallback picked {short}")

if __name__ == "__main__":
    try:
        asyncio.run(check_coverage())
    except Exception as e:
        print(f"❌ Coverage check raised exception: {e}")
