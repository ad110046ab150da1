"""
Verification Store
==================

Storage seam for verification records. The relay only needs
`store(record) -> bool`; the in-memory implementation backs development
and tests.

Records are never deduplicated by nullifier here. Enforcing one
verification per (identity, action) belongs to a real backing store.

Version: 0.1.0
"""

import asyncio
from abc import ABC, abstractmethod
from collections import OrderedDict

from shared.logging import get_logger
from shared.worldid.models import VerificationRecord


logger = get_logger(__name__)


class VerificationStore(ABC):
    """Abstract persistence for verification records."""

    @abstractmethod
    async def store(self, record: VerificationRecord) -> bool:
        """
        Persist a record.

        Args:
            record: Record built after a successful verification

        Returns:
            True when the record was stored
        """
        ...

    @abstractmethod
    async def get(self, verification_id: str) -> VerificationRecord | None:
        """Look up a record by its verification ID."""
        ...


class InMemoryVerificationStore(VerificationStore):
    """
    Bounded in-process store.

    Oldest records are dropped once `max_records` is reached.
    """

    def __init__(self, max_records: int = 10_000) -> None:
        self.max_records = max_records
        self._records: OrderedDict[str, VerificationRecord] = OrderedDict()
        self._lock = asyncio.Lock()

    async def store(self, record: VerificationRecord) -> bool:
        async with self._lock:
            self._records[record.verification_id] = record
            while len(self._records) > self.max_records:
                evicted_id, _ = self._records.popitem(last=False)
                logger.debug("verification_record_evicted", verification_id=evicted_id)

        logger.info(
            "verification_record_stored",
            verification_id=record.verification_id,
            nullifier_hash=record.nullifier_hash,
            action=record.action,
        )
        return True

    async def get(self, verification_id: str) -> VerificationRecord | None:
        return self._records.get(verification_id)

    async def find_by_nullifier(self, nullifier_hash: str) -> list[VerificationRecord]:
        """All stored records for a nullifier, oldest first."""
        return [r for r in self._records.values() if r.nullifier_hash == nullifier_hash]

    def clear_all(self) -> None:
        """Drop every record (testing)."""
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


_store: VerificationStore | None = None


def get_verification_store() -> VerificationStore:
    """Get the process-wide store, creating the in-memory default."""
    global _store

    if _store is None:
        _store = InMemoryVerificationStore()
        logger.info("verification_store_initialized", backend="memory")

    return _store


def set_verification_store(store: VerificationStore) -> None:
    """
    Set a custom verification store.

    Args:
        store: VerificationStore instance
    """
    global _store
    _store = store
    logger.info("verification_store_set", backend=type(store).__name__)


def reset_verification_store() -> None:
    """Reset the store to be re-initialized."""
    global _store
    _store = None
