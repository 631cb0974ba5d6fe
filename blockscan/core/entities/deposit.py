"""
Deposit Entity for BlockScan

One observed output paying a tracked address.
"""
from pydantic import BaseModel


class DepositRecord(BaseModel):
    """
    Represents a single output-to-address event found while scanning a block.
    Two records are the same deposit when every field matches.
    """
    tx_hash: str  # "<txid>:<vout index>"
    btc_address: str
    block_hash: str
    parent_hash: str
    block_height: int
    satoshi_amount: int
    bitcoin_amount: str  # 8 fractional digits, e.g. "0.50000000"

    class Config:
        json_schema_extra = {
            "example": {
                "tx_hash": "4a5e1e4baab89f3a32518a88c31bc87f618f76673e2cc77ab2127b7afdeda33b:0",
                "btc_address": "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa",
                "block_hash": "000000000019d6689c085ae165831e934ff763ae46a2a6c172b3f1b60a8ce26f",
                "parent_hash": "",
                "block_height": 0,
                "satoshi_amount": 5000000000,
                "bitcoin_amount": "50.00000000"
            }
        }
