import os
import ssl
import json
import logging
from decimal import Decimal
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from blockscan.core.interfaces.ledger import ILedgerReader
from blockscan.core.entities.block import Block, BlockTransaction, TxOutput
from blockscan.core.errors import ReaderError

logger = logging.getLogger(__name__)

DEFAULT_RPC_URL = "https://localhost:8334"
DEFAULT_CERT_PATH = os.path.join(os.path.expanduser("~"), ".btcd", "rpc.cert")


class BtcdRpcGateway(ILedgerReader):
    """
    Implementation of ILedgerReader over a btcd (or bitcoind) JSON-RPC endpoint.
    Amounts are decoded straight into Decimal so no value ever passes through float.
    """

    def __init__(
        self,
        url: str = DEFAULT_RPC_URL,
        user: Optional[str] = None,
        password: Optional[str] = None,
        cert_path: Optional[str] = DEFAULT_CERT_PATH,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        :param url: RPC endpoint, e.g. https://localhost:8334
        :param cert_path: btcd's self-signed rpc.cert; used as the only trusted CA when present.
        :param transport: optional httpx transport, used by tests.
        """
        self.url = url

        verify: Any = True
        if cert_path and os.path.exists(cert_path):
            verify = ssl.create_default_context(cafile=cert_path)

        self.client = httpx.AsyncClient(
            auth=(user, password or "") if user else None,
            verify=verify,
            timeout=httpx.Timeout(timeout),
            transport=transport
        )
        self._request_id = 0
        logger.info(f"BtcdRpcGateway initialized. URL: {url}")

    async def _call(self, method: str, params: List[Any]) -> Any:
        self._request_id += 1
        payload = {
            "jsonrpc": "1.0",
            "id": self._request_id,
            "method": method,
            "params": params
        }

        try:
            resp = await self.client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            raise ReaderError(f"{method} request failed: {e}") from e

        # bitcoind reports RPC errors with HTTP 500 and a JSON body, so read the body first
        try:
            data = json.loads(resp.text, parse_float=Decimal)
        except ValueError as e:
            raise ReaderError(f"{method} returned a non-JSON response (HTTP {resp.status_code})") from e

        if not isinstance(data, dict):
            raise ReaderError(f"{method} returned an unexpected payload")
        if data.get("error"):
            raise ReaderError(f"{method} RPC error: {data['error']}")
        if resp.status_code >= 400:
            raise ReaderError(f"{method} failed with HTTP {resp.status_code}")

        return data.get("result")

    async def resolve_block_hash(self, height: int) -> str:
        try:
            block_hash = await self._call("getblockhash", [height])
        except ReaderError as e:
            e.height = height
            raise

        if not isinstance(block_hash, str):
            raise ReaderError(f"getblockhash {height} returned no hash", height=height)
        return block_hash

    async def fetch_block(self, block_hash: str) -> Block:
        """
        Fetches the block with decoded transactions (verbosity 2).
        """
        try:
            raw = await self._call("getblock", [block_hash, 2])
        except ReaderError as e:
            e.block_hash = block_hash
            raise

        try:
            return self._map_block(raw)
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            raise ReaderError(f"Malformed block {block_hash}: {e}", block_hash=block_hash) from e

    def _map_block(self, raw: dict) -> Block:
        """
        Maps the node's verbose block JSON to the Block entity.
        """
        transactions = []
        for tx in raw.get("tx", []):
            outputs = []
            for vout in tx.get("vout", []):
                script = vout.get("scriptPubKey") or {}

                # btcd and older bitcoind list "addresses", bitcoind >= 22 a single "address"
                addresses = script.get("addresses")
                if addresses is None:
                    addresses = [script["address"]] if script.get("address") else []

                outputs.append(TxOutput(amount=vout["value"], addresses=addresses))

            transactions.append(BlockTransaction(txid=tx["txid"], outputs=outputs))

        return Block(
            hash=raw["hash"],
            parent_hash=raw.get("previousblockhash", ""),
            height=raw.get("height"),
            transactions=transactions
        )

    async def aclose(self) -> None:
        await self.client.aclose()
