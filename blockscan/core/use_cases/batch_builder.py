from decimal import Decimal, InvalidOperation
from typing import Any, List

from blockscan.core.entities.block import Block
from blockscan.core.entities.deposit import DepositRecord
from blockscan.core.entities.scan import ScanBatch
from blockscan.core.errors import ConversionError

SATOSHI_PER_BITCOIN = Decimal(100_000_000)
MAX_SATOSHI = 21_000_000 * 100_000_000


def _as_decimal(amount: Any) -> Decimal:
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ConversionError(f"Amount {amount!r} is not a number") from e
    if not value.is_finite():
        raise ConversionError(f"Amount {amount!r} is not finite")
    return value


def to_satoshis(amount: Any) -> int:
    """
    Exact display-unit to satoshi conversion. Anything finer than a
    satoshi, negative or above the money supply is rejected.
    """
    value = _as_decimal(amount) * SATOSHI_PER_BITCOIN
    if value != value.to_integral_value():
        raise ConversionError(f"Amount {amount} has more than 8 fractional digits")

    satoshis = int(value)
    if satoshis < 0 or satoshis > MAX_SATOSHI:
        raise ConversionError(f"Amount {amount} is out of range")
    return satoshis


def format_btc(amount: Any) -> str:
    # Formatted from the decimal itself, not from the satoshi value
    return format(_as_decimal(amount), ".8f")


def build_scan_batch(block: Block, height: int) -> ScanBatch:
    """
    One DepositRecord per output per destination address.
    Outputs without an address (OP_RETURN, bare multisig) produce nothing.
    """
    deposits: List[DepositRecord] = []

    for tx in block.transactions:
        for index, output in enumerate(tx.outputs):
            satoshis = to_satoshis(output.amount)
            bitcoin_amount = format_btc(output.amount)

            for address in output.addresses:
                deposits.append(DepositRecord(
                    tx_hash=f"{tx.txid}:{index}",
                    btc_address=address,
                    block_hash=block.hash,
                    parent_hash=block.parent_hash,
                    block_height=height,
                    satoshi_amount=satoshis,
                    bitcoin_amount=bitcoin_amount
                ))

    return ScanBatch(
        height=height,
        block_hash=block.hash,
        parent_hash=block.parent_hash,
        deposits=deposits
    )
