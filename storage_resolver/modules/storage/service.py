"""Cache-aside resolution of storage identifiers.

``StorageService.get`` classifies the identifier, consults the cache
store, falls back to the origin on a miss and optionally persists the
outcome. Failed lookups are persisted too and act as negative cache
entries: a later cached lookup returns the same error without touching
the origin.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Awaitable, Callable
import httpx
from storage_resolver.core.errors import AlreadyExistsError, ConfigurationError, ErrorDetail, NotFoundError, StorageError
from storage_resolver.modules.storage.fetcher import StorageFetcher
from storage_resolver.modules.storage.identifiers import classify
from storage_resolver.modules.storage.normalizer import first_error
from storage_resolver.modules.storage.schemas import OriginConfig, StorageRecord
from storage_resolver.platform.ports.storage_cache import StorageCachePort

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class Resolution:
    """Outcome of a resolution: a record, its first error, or both.

    ``record`` is None only when the identifier was rejected before any
    cache or network access.
    """
    record: StorageRecord | None
    error: StorageError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def errors(self) -> list[ErrorDetail]:
        if self.record is not None and self.record.errors:
            return list(self.record.errors)
        return [self.error.detail()] if self.error else []

    def raise_for_error(self) -> StorageRecord:
        if self.error is not None:
            raise self.error
        return self.record


async def decide_is_new(used_cache: bool, exists: Callable[[], Awaitable[bool]]) -> bool:
    """Whether a record about to be saved is a new entity.

    A miss already observed through the cache is authoritative; otherwise
    the store is asked now.
    """
    if used_cache:
        return True
    return not await exists()


class StorageService:
    def __init__(self, store: StorageCachePort, origins: OriginConfig, *, transport: httpx.AsyncBaseTransport | None = None):
        self.store = store
        self.origins = origins
        self.fetcher = StorageFetcher(origins, transport=transport)

    async def get(self, val: str, *, use_cache: bool = True, save: bool = True) -> Resolution:
        try:
            target = classify(val, self.origins)
        except (NotFoundError, ConfigurationError) as e:
            logger.debug(f"[Storage] rejected {val!r}: {e.message}")
            return Resolution(record=None, error=e)

        if use_cache:
            cached = await self.store.find_by_unique(val)
            if cached is not None:
                logger.debug(f"[Storage] cache hit {val!r}")
                return Resolution(record=cached, error=first_error(cached))
            logger.debug(f"[Storage] cache miss {val!r}")

        record = await self.fetcher.fetch(target)
        record.unique = val

        if save:
            record = await self._save(record, used_cache=use_cache)

        return Resolution(record=record, error=first_error(record))

    async def _save(self, record: StorageRecord, *, used_cache: bool) -> StorageRecord:
        is_new = await decide_is_new(used_cache, lambda: self._exists(record.unique))
        if is_new:
            record.id = uuid.uuid4()
            logger.debug(f"[Storage] insert {record.unique!r} id={record.id}")
            try:
                return await self.store.insert(record)
            except AlreadyExistsError:
                # lost a race with a concurrent resolution of the same identifier
                logger.info(f"[Storage] {record.unique!r} already cached, keeping stored entity")
                return record
        logger.debug(f"[Storage] update {record.unique!r}")
        return await self.store.update(record)

    async def _exists(self, unique: str) -> bool:
        return await self.store.find_by_unique(unique) is not None
