"""Behavioural tests for cache-aside storage resolution."""

import asyncio

import httpx
import pytest

from helpers import PAIR, FakeOrigin
from storage_resolver.core.errors import (
    AlreadyExistsError, ConfigurationError, NotFoundError, ServerError, TransportError,
)
from storage_resolver.modules.storage.schemas import StorageRecord
from storage_resolver.modules.storage.service import StorageService, decide_is_new
from storage_resolver.platform.adapters.cache_memory import MemoryStorageCache

APPROVED = {"path": "/x", "status": "approved", "size": 1024}


def _service(origins, origin: FakeOrigin, store: MemoryStorageCache | None = None) -> StorageService:
    return StorageService(store if store is not None else MemoryStorageCache(), origins, transport=origin.transport())


def test_pair_identifier_resolves_from_origin(origins) -> None:
    service = _service(origins, FakeOrigin(200, json=APPROVED))

    res = asyncio.run(service.get(PAIR, use_cache=True, save=True))

    assert res.ok
    assert res.error is None
    assert res.errors == []
    assert res.record.unique == PAIR
    assert res.record.path == "/x"
    assert res.record.status == "approved"
    assert res.record.size == 1024
    assert res.record.id is not None
    assert res.record.created_at is not None


def test_invalid_path_fails_without_io(origins) -> None:
    origin = FakeOrigin(200, json=APPROVED)
    store = MemoryStorageCache()

    res = asyncio.run(_service(origins, origin, store).get("../evil"))

    assert res.record is None
    assert res.errors[0].type == "not_found"
    assert isinstance(res.error, NotFoundError)
    assert origin.calls == 0
    assert len(store) == 0


def test_missing_pair_origin_is_configuration_error(origins) -> None:
    origin = FakeOrigin(200, json=APPROVED)
    service = _service(origins.model_copy(update={"pair_origin": ""}), origin)

    res = asyncio.run(service.get(PAIR))

    assert isinstance(res.error, ConfigurationError)
    assert res.record is None
    assert origin.calls == 0
    with pytest.raises(ConfigurationError):
        res.raise_for_error()


def test_second_cached_lookup_skips_origin(origins) -> None:
    origin = FakeOrigin(200, json=APPROVED)
    service = _service(origins, origin)

    async def _run():
        first = await service.get(PAIR, use_cache=True, save=True)
        second = await service.get(PAIR, use_cache=True, save=True)
        return first, second

    first, second = asyncio.run(_run())

    assert origin.calls == 1
    assert first.record.unique == second.record.unique == PAIR
    assert first.record.id == second.record.id
    assert second.raise_for_error().path == "/x"


def test_failed_lookup_is_negatively_cached(origins) -> None:
    origin = FakeOrigin(503, content=b"unavailable")
    service = _service(origins, origin)

    async def _run():
        first = await service.get(PAIR, use_cache=True, save=True)
        second = await service.get(PAIR, use_cache=True, save=True)
        return first, second

    first, second = asyncio.run(_run())

    assert origin.calls == 1
    assert isinstance(first.error, ServerError)
    assert isinstance(second.error, ServerError)
    assert second.error.status_code == 503
    assert second.record.status_code == 503
    assert second.errors[0].type == "server_error"


@pytest.mark.parametrize(
    "origin, kind, status_code",
    [
        (FakeOrigin(404, content=b""), NotFoundError, 404),
        (FakeOrigin(204, content=b""), NotFoundError, 404),
        (FakeOrigin(503, content=b""), ServerError, 503),
        (FakeOrigin(exc=httpx.ConnectError("connection refused")), TransportError, 500),
    ],
)
def test_origin_status_mapping(origins, origin, kind, status_code) -> None:
    res = asyncio.run(_service(origins, origin).get(PAIR, save=False))

    assert isinstance(res.error, kind)
    assert res.record.status_code == status_code
    assert res.record.unique == PAIR


def test_unsaved_lookup_leaves_store_untouched(origins) -> None:
    store = MemoryStorageCache()

    res = asyncio.run(_service(origins, FakeOrigin(200, json=APPROVED), store).get(PAIR, save=False))

    assert res.ok
    assert res.record.id is None
    assert len(store) == 0


def test_uncached_save_updates_existing_entity(origins) -> None:
    store = MemoryStorageCache()
    first_origin = FakeOrigin(200, json=APPROVED)
    second_origin = FakeOrigin(200, json={"path": "/x", "status": "banned", "size": 2048})

    async def _run():
        first = await _service(origins, first_origin, store).get(PAIR, use_cache=True, save=True)
        second = await _service(origins, second_origin, store).get(PAIR, use_cache=False, save=True)
        stored = await store.find_by_unique(PAIR)
        return first, second, stored

    first, second, stored = asyncio.run(_run())

    assert len(store) == 1
    assert second_origin.calls == 1
    assert second.record.id == first.record.id
    assert stored.id == first.record.id
    assert stored.status == "banned"
    assert stored.size == 2048
    assert stored.created_at == first.record.created_at


def test_uncached_save_of_unknown_identifier_inserts(origins) -> None:
    store = MemoryStorageCache()

    res = asyncio.run(_service(origins, FakeOrigin(200, json=APPROVED), store).get(PAIR, use_cache=False, save=True))

    assert res.ok
    assert len(store) == 1


def test_uncached_save_replaces_cached_failure(origins) -> None:
    store = MemoryStorageCache()

    async def _run():
        await _service(origins, FakeOrigin(500, content=b""), store).get(PAIR)
        fixed = await _service(origins, FakeOrigin(200, json=APPROVED), store).get(PAIR, use_cache=False)
        cached = await _service(origins, FakeOrigin(500, content=b""), store).get(PAIR)
        return fixed, cached

    fixed, cached = asyncio.run(_run())

    assert fixed.ok
    assert cached.ok
    assert cached.record.errors == []
    assert cached.record.status_code is None


class RacingStore(MemoryStorageCache):
    """Store that loses every insert to a concurrent writer."""

    async def insert(self, record: StorageRecord) -> StorageRecord:
        raise AlreadyExistsError(record.unique)


def test_duplicate_insert_race_is_benign(origins) -> None:
    res = asyncio.run(_service(origins, FakeOrigin(200, json=APPROVED), RacingStore()).get(PAIR))

    assert res.ok
    assert res.record.unique == PAIR


def test_path_identifier_uses_authenticated_origin(origins) -> None:
    origin = FakeOrigin(200, json={"path": "/videos/a.mp4", "status": "pending"})

    res = asyncio.run(_service(origins, origin).get("videos/a.mp4"))

    assert res.ok
    assert res.record.status == "pending"
    assert origin.requests[0].headers["authorization"].startswith("Basic ")


def test_decide_is_new_trusts_cache_miss() -> None:
    async def exists() -> bool:
        raise AssertionError("existence must not be rechecked")

    assert asyncio.run(decide_is_new(True, exists)) is True


@pytest.mark.parametrize("found, expected", [(True, False), (False, True)])
def test_decide_is_new_checks_store_when_cache_unused(found, expected) -> None:
    async def exists() -> bool:
        return found

    assert asyncio.run(decide_is_new(False, exists)) is expected


@pytest.mark.parametrize("val", [PAIR + "\n", " " + PAIR])
def test_padded_pair_is_rejected_without_io(origins, val) -> None:
    origin = FakeOrigin(200, json=APPROVED)
    store = MemoryStorageCache()

    res = asyncio.run(_service(origins, origin, store).get(val))

    assert res.record is None
    assert res.errors[0].type == "not_found"
    assert origin.calls == 0
    assert len(store) == 0
