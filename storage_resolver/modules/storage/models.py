from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, BigInteger, Float, Boolean, JSON, Index
from storage_resolver.core.base import Base, TimestampedMixin

class Storage(Base, TimestampedMixin):
    __tablename__ = "storages"
    __table_args__ = (Index("ix_storages_unique", "unique", unique=True),)

    # Caller-supplied identifier ("<oid>/<oid>" or a relative path); the cache key.
    unique: Mapped[str] = mapped_column(String(1024))
    path: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    hls: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    hls_key: Mapped[str | None] = mapped_column(String(256), nullable=True)

    status: Mapped[str | None] = mapped_column(String(16), nullable=True)  # pending | approved | unapproved | banned
    name: Mapped[str | None] = mapped_column(String(512), nullable=True)
    type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    sub_type: Mapped[str | None] = mapped_column(String(64), nullable=True)

    size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    duration: Mapped[float | None] = mapped_column(Float, nullable=True)  # seconds
    width: Mapped[int | None] = mapped_column(Integer, nullable=True)
    height: Mapped[int | None] = mapped_column(Integer, nullable=True)
    pixels: Mapped[int | None] = mapped_column(Integer, nullable=True)
    meta: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    complete: Mapped[bool] = mapped_column(Boolean, default=False)

    # Failed lookups are cached too: errors hold the recorded ErrorDetail dicts.
    errors: Mapped[list | None] = mapped_column(JSON, nullable=True)
    status_code: Mapped[int | None] = mapped_column(Integer, nullable=True)
