from sqlalchemy.ext.asyncio import AsyncSession
from storage_resolver.core.config import settings
from storage_resolver.platform.ports.storage_cache import StorageCachePort
from storage_resolver.platform.adapters.cache_memory import MemoryStorageCache

class ProviderRegistry:
    _memory_cache: MemoryStorageCache | None = None

    @classmethod
    def storage_cache(cls, session: AsyncSession | None = None) -> StorageCachePort:
        if settings.STORAGE_CACHE_PROVIDER == "memory":
            if cls._memory_cache is None:
                cls._memory_cache = MemoryStorageCache()
            return cls._memory_cache
        if session is None:
            raise RuntimeError("sql storage cache requires a database session")
        from storage_resolver.modules.storage.repository import StorageRepository
        return StorageRepository(session)

registry = ProviderRegistry()
