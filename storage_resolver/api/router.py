from fastapi import APIRouter
from storage_resolver.modules.storage.router import router as storage_router

api_router = APIRouter()
api_router.include_router(storage_router, prefix="/storages", tags=["storages"])

@api_router.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
