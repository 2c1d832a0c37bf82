import uuid
from datetime import datetime
from typing import Any, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator
from storage_resolver.core.config import Settings
from storage_resolver.core.errors import ErrorDetail

StorageStatus = Literal["pending", "approved", "unapproved", "banned"]

MAX_DURATION = 2_592_000  # 30 days, seconds
MAX_DIMENSION = 32767
MAX_PIXELS = 268_435_456


class StorageAttributes(BaseModel):
    """Descriptive fields shared by the origin payload and the cached record."""
    path: str | None = None
    hls: str | None = None
    hls_key: str | None = None

    name: str | None = Field(default=None, max_length=512)
    type: str | None = Field(default=None, max_length=32)
    sub_type: str | None = Field(default=None, max_length=64)

    size: int | None = Field(default=None, ge=0)
    duration: float | None = Field(default=None, ge=0, le=MAX_DURATION)
    width: int | None = Field(default=None, ge=0, le=MAX_DIMENSION)
    height: int | None = Field(default=None, ge=0, le=MAX_DIMENSION)
    pixels: int | None = Field(default=None, ge=0, le=MAX_PIXELS)
    meta: dict[str, Any] | None = None

    complete: bool = False


class StoragePayload(StorageAttributes):
    """Body returned by an origin for HTTP 200."""
    path: str
    status: StorageStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StorageRecord(StorageAttributes):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID | None = None
    unique: str = ""
    # None only on records that never got a payload (failed lookups).
    status: StorageStatus | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    errors: list[ErrorDetail] = Field(default_factory=list)
    status_code: int | None = None

    @field_validator("errors", mode="before")
    @classmethod
    def _errors_default(cls, v):
        return v or []

    @classmethod
    def from_payload(cls, payload: StoragePayload) -> "StorageRecord":
        return cls(**payload.model_dump())

    def to_wire(self) -> dict[str, Any]:
        data = self.model_dump(mode="json", exclude_none=True)
        if not data.get("errors"):
            data.pop("errors", None)
        if not data.get("complete"):
            data.pop("complete", None)
        return data


class OriginConfig(BaseModel):
    """Origins and credentials a resolver is built with; read-only after construction."""
    model_config = ConfigDict(frozen=True)

    pair_origin: str = ""
    path_origin: str = ""
    username: str = ""
    password: str = ""
    timeout: float = 20.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "OriginConfig":
        return cls(
            pair_origin=settings.STORAGE_ORIGIN.rstrip("/"),
            path_origin=settings.STORAGE_PATH_ORIGIN.rstrip("/"),
            username=settings.STORAGE_USERNAME,
            password=settings.STORAGE_PASSWORD,
            timeout=settings.STORAGE_FETCH_TIMEOUT,
        )
