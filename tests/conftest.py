"""
tests/conftest.py

Shared fixtures: a throwaway SQLite database (aiosqlite) with every table
created, and both storage backends pointed at temporary locations.
"""

from __future__ import annotations

import os
from pathlib import Path

# keep app startup from reaching for a real Postgres during tests
os.environ.setdefault("DB_MANAGE", "migrations")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.base import Base
from app.core.db import load_models
from app.platform.adapters.storage_local import LocalFilesystemStorage
from app.platform.adapters.storage_s3 import S3Storage
from tests.helpers import FakeS3Client, make_image


# =============================================================================
# Database
# =============================================================================


@pytest_asyncio.fixture
async def db_engine(tmp_path: Path):
    load_models()
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


# =============================================================================
# Storage
# =============================================================================


@pytest.fixture
def upload_root(tmp_path: Path) -> Path:
    return tmp_path / "public" / "uploads"


@pytest.fixture
def local_storage(upload_root: Path) -> LocalFilesystemStorage:
    return LocalFilesystemStorage(str(upload_root), public_prefix="/uploads", write_timeout=5)


@pytest.fixture
def fake_s3() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def s3_storage(fake_s3: FakeS3Client) -> S3Storage:
    return S3Storage(
        fake_s3,
        endpoint_url="https://storage.example.test",
        public_base_url="https://cdn.example.test/storage/v1/object/public",
        bucket_prefix="",
        write_timeout=5,
    )


# =============================================================================
# Content
# =============================================================================


@pytest.fixture
def png_bytes() -> bytes:
    return make_image()


@pytest.fixture
def seed_root(tmp_path: Path) -> Path:
    root = tmp_path / "seed_data"
    root.mkdir()
    return root
