from typing import Protocol, runtime_checkable
from storage_resolver.modules.storage.schemas import StorageRecord

@runtime_checkable
class StorageCachePort(Protocol):
    async def find_by_unique(self, unique: str) -> StorageRecord | None: ...
    async def insert(self, record: StorageRecord) -> StorageRecord: ...
    async def update(self, record: StorageRecord) -> StorageRecord: ...
