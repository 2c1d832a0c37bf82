import logging
from datetime import datetime, timezone
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from storage_resolver.core.errors import AlreadyExistsError
from storage_resolver.modules.storage.models import Storage
from storage_resolver.modules.storage.schemas import StorageRecord
from storage_resolver.platform.ports.storage_cache import StorageCachePort

log = logging.getLogger(__name__)

# Columns copied from a record onto a row; identity and timestamps are owned by the row.
_WRITABLE = (
    "path", "hls", "hls_key", "status", "name", "type", "sub_type",
    "size", "duration", "width", "height", "pixels", "meta", "complete",
    "status_code",
)

def _apply(obj: Storage, record: StorageRecord) -> Storage:
    for k in _WRITABLE:
        setattr(obj, k, getattr(record, k))
    obj.errors = [e.model_dump(exclude_none=True) for e in record.errors] or None
    return obj

class StorageRepository(StorageCachePort):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get(self, unique: str) -> Storage | None:
        q = select(Storage).where(
            Storage.unique == unique,
            Storage.deleted_at.is_(None),
        )
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def find_by_unique(self, unique: str) -> StorageRecord | None:
        obj = await self._get(unique)
        if not obj:
            return None
        return StorageRecord.model_validate(obj)

    async def insert(self, record: StorageRecord) -> StorageRecord:
        obj = _apply(Storage(unique=record.unique), record)
        if record.id:
            obj.id = record.id
        if record.created_at:
            obj.created_at = record.created_at
        self.session.add(obj)
        try:
            await self.session.flush()
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise AlreadyExistsError(record.unique) from e
        await self.session.refresh(obj)
        return StorageRecord.model_validate(obj)

    async def update(self, record: StorageRecord) -> StorageRecord:
        obj = await self._get(record.unique)
        if not obj:
            raise KeyError(record.unique)
        _apply(obj, record)
        obj.updated_at = datetime.now(timezone.utc)
        await self.session.flush()
        await self.session.commit()
        await self.session.refresh(obj)
        return StorageRecord.model_validate(obj)
