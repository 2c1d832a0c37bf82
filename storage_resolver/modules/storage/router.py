from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from storage_resolver.core.config import settings
from storage_resolver.core.db import get_session
from storage_resolver.modules.storage.normalizer import DEFAULT_STATUS_CODE
from storage_resolver.modules.storage.schemas import OriginConfig
from storage_resolver.modules.storage.service import StorageService
from storage_resolver.platform.provider_registry import registry

router = APIRouter()

def svc(session: AsyncSession = Depends(get_session)) -> StorageService:
    return StorageService(registry.storage_cache(session), OriginConfig.from_settings(settings))

@router.get("/{unique:path}")
async def get_storage(unique: str, cache: bool = True, save: bool = True, service: StorageService = Depends(svc)):
    res = await service.get(unique, use_cache=cache, save=save)
    if res.ok:
        return res.record.to_wire()
    status_code = (res.record.status_code if res.record else None) or res.error.status_code or DEFAULT_STATUS_CODE
    return JSONResponse(
        status_code=status_code,
        content={"errors": [e.model_dump(exclude_none=True) for e in res.errors]},
    )
