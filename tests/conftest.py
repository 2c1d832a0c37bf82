"""Pytest configuration for the storage resolver test suite."""

import os
import sys
from pathlib import Path

import pytest


def _ensure_test_env() -> None:
    """Seed environment before settings are loaded."""
    os.environ.setdefault("DATABASE_DSN", "sqlite+aiosqlite:///:memory:")
    os.environ.setdefault("STORAGE_CACHE_PROVIDER", "memory")
    os.environ.setdefault("ENV", "dev")


_ensure_test_env()

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from storage_resolver.modules.storage.schemas import OriginConfig  # noqa: E402


@pytest.fixture
def origins() -> OriginConfig:
    return OriginConfig(
        pair_origin="https://objects.example.test",
        path_origin="https://files.example.test/root",
        username="svc",
        password="secret",
        timeout=5.0,
    )
