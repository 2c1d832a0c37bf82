import asyncio
import httpx
from pydantic import ValidationError
from storage_resolver.core.errors import (
    NotFoundError, ParseError, ServerError, StorageError, TransportError,
)
from storage_resolver.modules.storage.schemas import StoragePayload, StorageRecord

DEFAULT_STATUS_CODE = 500

def record_from_response(status_code: int, body: bytes) -> StorageRecord:
    # Only an exact 200 carries a record; any other non-5xx status is treated as missing.
    if status_code >= 500:
        raise ServerError(status_code=status_code)
    if status_code != 200:
        raise NotFoundError()
    try:
        payload = StoragePayload.model_validate_json(body)
    except ValidationError as e:
        raise ParseError(f"Storage: Invalid payload: {e.error_count()} validation error(s): {_first_error(e)}") from e
    return StorageRecord.from_payload(payload)

def _first_error(e: ValidationError) -> str:
    err = e.errors()[0]
    loc = ".".join(str(p) for p in err.get("loc", ())) or "body"
    return f"{loc}: {err.get('msg')}"

def to_storage_error(exc: Exception) -> StorageError:
    if isinstance(exc, StorageError):
        return exc
    if isinstance(exc, asyncio.TimeoutError):
        return TransportError("Storage: Request timed out")
    if isinstance(exc, (httpx.HTTPError, httpx.InvalidURL)):
        return TransportError(str(exc) or exc.__class__.__name__)
    return StorageError(str(exc) or exc.__class__.__name__)

def attach_error(record: StorageRecord, exc: Exception) -> StorageRecord:
    """Append ``exc`` to the record's errors and settle its status code.

    An already-set status code wins, then the error's own, then 500.
    """
    err = to_storage_error(exc)
    record.errors.append(err.detail())
    if not record.status_code:
        record.status_code = err.status_code or DEFAULT_STATUS_CODE
    return record

def first_error(record: StorageRecord) -> StorageError | None:
    if not record.errors:
        return None
    return StorageError.from_detail(record.errors[0])
