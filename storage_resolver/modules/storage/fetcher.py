import asyncio
import logging
import httpx
from storage_resolver.core.errors import StorageError, TransportError
from storage_resolver.modules.storage.identifiers import StorageTarget, require_credentials
from storage_resolver.modules.storage.normalizer import attach_error, record_from_response
from storage_resolver.modules.storage.schemas import OriginConfig, StorageRecord

logger = logging.getLogger(__name__)

class StorageFetcher:
    """Fetches authoritative storage metadata from the configured origins."""

    def __init__(self, origins: OriginConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.origins = origins
        self.transport = transport

    async def fetch(self, target: StorageTarget) -> StorageRecord:
        """Return the origin's record for ``target``.

        Failures never escape: they are recorded on the returned record.
        """
        try:
            status_code, body = await self.get(target.url, auth=target.auth)
            return record_from_response(status_code, body)
        except (StorageError, httpx.HTTPError, httpx.InvalidURL, asyncio.TimeoutError) as e:
            logger.debug(f"[Storage] fetch {target.url} failed: {e!r}")
            return attach_error(StorageRecord(), e)

    async def get(self, url: str, *, auth: bool) -> tuple[int, bytes]:
        credentials = require_credentials(self.origins) if auth else None
        timeout = self.origins.timeout
        async with httpx.AsyncClient(auth=credentials, timeout=timeout, transport=self.transport) as client:
            try:
                res = await asyncio.wait_for(client.get(url), timeout=timeout)
            except httpx.TimeoutException as e:
                raise TransportError(f"Storage: Request timed out: {e}") from e
        body = res.content
        logger.debug(f"[Storage] {res.status_code} {body.decode('utf-8', errors='replace')}")
        return res.status_code, body
