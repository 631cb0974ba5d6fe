import json
import logging
from pathlib import Path
from typing import List, Union

from pydantic import BaseModel, Field, ValidationError

from blockscan.core.interfaces.wallet_store import IWalletStore
from blockscan.core.entities.address import AddressRecord
from blockscan.core.errors import PersistenceError

logger = logging.getLogger(__name__)


class AddressImport(BaseModel):
    """Address import file: {"btc_addresses": ["1A1z...", ...]}"""
    btc_addresses: List[str] = Field(default_factory=list)


class JsonWalletRepo(IWalletStore):
    """
    Wallet document: a JSON array of address records, rewritten whole on save.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> List[AddressRecord]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise PersistenceError(f"Wallet not found: {self.path}", path=str(self.path), missing=True) from e
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Cannot read wallet {self.path}: {e}", path=str(self.path)) from e

        if raw is None:
            raw = []
        if not isinstance(raw, list):
            raise PersistenceError(f"Wallet {self.path} is not a list of addresses", path=str(self.path))

        try:
            records = [AddressRecord.model_validate(item) for item in raw]
        except ValidationError as e:
            raise PersistenceError(f"Malformed wallet {self.path}: {e}", path=str(self.path)) from e

        logger.info(f"Loaded {len(records)} addresses from {self.path}")
        return records

    def save(self, records: List[AddressRecord]):
        payload = json.dumps([r.model_dump(mode="json") for r in records], indent=4)
        try:
            self.path.write_text(payload, encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Cannot write wallet {self.path}: {e}", path=str(self.path)) from e

        logger.info(f"Saved {len(records)} addresses to {self.path}")


def load_address_file(path: Union[str, Path]) -> List[str]:
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise PersistenceError(f"Address file not found: {path}", path=str(path), missing=True) from e
    except OSError as e:
        raise PersistenceError(f"Cannot read address file {path}: {e}", path=str(path)) from e

    try:
        return AddressImport.model_validate_json(raw).btc_addresses
    except ValidationError as e:
        raise PersistenceError(f"Malformed address file {path}: {e}", path=str(path)) from e
