from abc import ABC, abstractmethod
from typing import List

from blockscan.core.entities.address import AddressRecord


class IWalletStore(ABC):
    @abstractmethod
    def load(self) -> List[AddressRecord]:
        """Full ordered address collection. Raises PersistenceError."""
        pass

    @abstractmethod
    def save(self, records: List[AddressRecord]) -> None:
        """Overwrites the stored collection. Raises PersistenceError."""
        pass
