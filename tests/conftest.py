"""Shared test infrastructure for the ZephVault test suite.

Provides:
- db_session: async SQLite in-memory session with all tables created
- fake_storage: in-memory stand-in for StorageGateway
- make_property / make_tenant / make_document: row factories
- app_client: factory for an HTTPX client over a minimal FastAPI app
"""

import uuid
from datetime import date
from pathlib import PurePosixPath

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Import Base first, then models to register all tables
from zephvault.infra.database import Base

import zephvault.domain.models  # noqa: F401

from zephvault.domain.models import Document, Property, Tenant, Unit
from zephvault.infra.storage import BucketInfo, StorageError, UrlCheck, extract_storage_path

STORAGE_BASE = "https://proj.supabase.co/storage/v1/object/public/documents"


# ---------------------------------------------------------------------------
# Database session fixture
# ---------------------------------------------------------------------------

@pytest.fixture
async def db_session():
    """Async SQLite in-memory session with all tables created.

    Creates a fresh engine + tables for each test, yields a session,
    then rolls back and tears down.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


# ---------------------------------------------------------------------------
# Storage fake
# ---------------------------------------------------------------------------

class FakeStorage:
    """In-memory bucket with the StorageGateway interface.

    ``files`` maps object paths to bytes. Set ``fail_downloads`` to make
    every download raise StorageError.
    """

    def __init__(self, bucket: str = "documents"):
        self.bucket = bucket
        self.files: dict[str, bytes] = {}
        self.removed: list[str] = []
        self.fail_downloads = False
        self.public_check = UrlCheck(accessible=True, status=200, content_length=2048)
        self.buckets = [BucketInfo(name=bucket, public=True)]
        self.download_calls = 0

    def public_url(self, path: str) -> str:
        return f"{STORAGE_BASE}/{path}"

    def path_for(self, file_url: str):
        return extract_storage_path(file_url, self.bucket)

    async def download(self, path: str) -> bytes:
        self.download_calls += 1
        if self.fail_downloads:
            raise StorageError(f"Download of {path} failed with HTTP 500")
        if path not in self.files:
            raise StorageError(f"Download of {path} failed with HTTP 404")
        return self.files[path]

    async def upload(self, path: str, content: bytes, content_type: str = "application/octet-stream") -> str:
        self.files[path] = content
        return self.public_url(path)

    async def remove(self, paths: list[str]) -> None:
        for path in paths:
            self.files.pop(path, None)
            self.removed.append(path)

    async def list_buckets(self) -> list[BucketInfo]:
        return list(self.buckets)

    async def check_public_url(self, url: str) -> UrlCheck:
        return self.public_check


@pytest.fixture
def fake_storage():
    return FakeStorage()


# ---------------------------------------------------------------------------
# Row factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_property(db_session):
    """Factory for Property rows.

    Usage:
        prop = await make_property(name="Faith Plaza")
    """
    async def _factory(name: str = "Faith Plaza", address: str = "12 Marina Road, Lagos") -> Property:
        prop = Property(id=str(uuid.uuid4()), name=name, address=address)
        db_session.add(prop)
        await db_session.flush()
        return prop

    return _factory


@pytest.fixture
def make_tenant(db_session, make_property):
    """Factory for a Tenant in its own Unit (and Property unless one is given).

    Usage:
        tenant = await make_tenant(full_name="Jane Doe", rent_due_date=date(2025, 1, 8))
    """
    async def _factory(
        full_name: str = "Jane Doe",
        email: str = "jane@example.com",
        rent_due_date: date = date(2025, 1, 8),
        unit_number: str = "A1",
        reminder_status: str = "active",
        prop: Property | None = None,
        yearly_rent_amount: float | None = 1_200_000,
    ) -> Tenant:
        prop = prop or await make_property()
        unit = Unit(
            id=str(uuid.uuid4()),
            property_id=prop.id,
            unit_number=unit_number,
            status="occupied",
        )
        db_session.add(unit)
        tenant = Tenant(
            id=str(uuid.uuid4()),
            unit_id=unit.id,
            property_id=prop.id,
            full_name=full_name,
            email=email,
            phone_number="+2348000000000",
            rent_due_date=rent_due_date,
            yearly_rent_amount=yearly_rent_amount,
            reminder_status=reminder_status,
        )
        db_session.add(tenant)
        await db_session.commit()
        return tenant

    return _factory


@pytest.fixture
def make_document(db_session):
    """Factory for Document rows stored under ``documents/<category>/``.

    Usage:
        doc = await make_document(file_name="lease.pdf", category="lease")
    """
    async def _factory(
        file_name: str = "lease.pdf",
        category: str = "lease",
        ai_summary: str | None = None,
        path: str | None = None,
    ) -> Document:
        path = path or f"{category}/{uuid.uuid4().hex}{PurePosixPath(file_name).suffix}"
        doc = Document(
            id=str(uuid.uuid4()),
            file_name=file_name,
            file_url=f"{STORAGE_BASE}/{path}",
            category=category,
            ai_summary=ai_summary,
        )
        db_session.add(doc)
        await db_session.commit()
        return doc

    return _factory


# ---------------------------------------------------------------------------
# App client factory
# ---------------------------------------------------------------------------

@pytest.fixture
def app_client(db_session, fake_storage):
    """Build an HTTPX AsyncClient wired to a test FastAPI app.

    Uses a fresh FastAPI app with only the given routers, the test session
    in place of ``get_db`` and ``fake_storage`` in place of ``get_storage``.

    Usage:
        async with app_client(ai_router) as client: ...
    """
    from zephvault.infra.database import get_db
    from zephvault.infra.storage import get_storage

    def _factory(*routers) -> AsyncClient:
        test_app = FastAPI()
        for router in routers:
            test_app.include_router(router)

        async def _override_get_db():
            yield db_session

        test_app.dependency_overrides[get_db] = _override_get_db
        test_app.dependency_overrides[get_storage] = lambda: fake_storage

        return AsyncClient(
            transport=ASGITransport(app=test_app),
            base_url="http://testserver",
        )

    return _factory
