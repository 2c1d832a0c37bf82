import asyncio
import logging
import uuid
from datetime import datetime, timezone
from storage_resolver.core.errors import AlreadyExistsError
from storage_resolver.modules.storage.schemas import StorageRecord
from storage_resolver.platform.ports.storage_cache import StorageCachePort

log = logging.getLogger("cache.memory")

def _now() -> datetime:
    return datetime.now(timezone.utc)

class MemoryStorageCache(StorageCachePort):
    """Process-local cache store keyed by ``unique``. For local runs and tests."""

    def __init__(self):
        self._records: dict[str, StorageRecord] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._records)

    async def find_by_unique(self, unique: str) -> StorageRecord | None:
        obj = self._records.get(unique)
        if obj is None or obj.deleted_at is not None:
            return None
        return obj.model_copy(deep=True)

    async def insert(self, record: StorageRecord) -> StorageRecord:
        async with self._lock:
            if record.unique in self._records:
                raise AlreadyExistsError(record.unique)
            now = _now()
            obj = record.model_copy(deep=True)
            obj.id = obj.id or uuid.uuid4()
            obj.created_at = obj.created_at or now
            obj.updated_at = now
            self._records[obj.unique] = obj
            log.debug(f"[MEMORY CACHE] insert unique={obj.unique} id={obj.id}")
            return obj.model_copy(deep=True)

    async def update(self, record: StorageRecord) -> StorageRecord:
        async with self._lock:
            current = self._records.get(record.unique)
            if current is None:
                raise KeyError(record.unique)
            obj = record.model_copy(deep=True)
            obj.id = current.id
            obj.created_at = current.created_at
            obj.updated_at = _now()
            self._records[obj.unique] = obj
            log.debug(f"[MEMORY CACHE] update unique={obj.unique} id={obj.id}")
            return obj.model_copy(deep=True)
