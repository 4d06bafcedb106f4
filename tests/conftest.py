"""
Pytest configuration and fixtures for AlbumVault tests
"""

import pytest
from httpx import ASGITransport, AsyncClient

from albumvault.db import init_db, close_db
from albumvault.main import app
from albumvault.models.album import Album
from albumvault.models.user import User
from albumvault.services.album_counts import AlbumCountReconciler
from albumvault.services.color import DominantColorSampler
from albumvault.services.ingestion import IngestionOrchestrator
from albumvault.services.photo_builder import PhotoRecordBuilder
from albumvault.services.security import hash_password
from albumvault.services.storage import LocalStorage, get_storage
from tests.helpers import TEST_PASSWORD


@pytest.fixture(scope="function")
async def db_setup():
    """Fresh in-memory SQLite database for each test."""
    await init_db("sqlite://:memory:")
    try:
        yield
    finally:
        await close_db()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "uploads", "/uploads")


@pytest.fixture
def orchestrator(storage):
    return IngestionOrchestrator(
        storage=storage,
        builder=PhotoRecordBuilder(),
        reconciler=AlbumCountReconciler(),
        sampler=DominantColorSampler(),
    )


@pytest.fixture
async def user(db_setup):
    return await User.create(name="Owner", email="owner@example.com", password_hash=hash_password(TEST_PASSWORD))


@pytest.fixture
async def other_user(db_setup):
    return await User.create(name="Other", email="other@example.com", password_hash=hash_password(TEST_PASSWORD))


@pytest.fixture
async def album(user):
    return await Album.create(user=user, title="Holidays")


@pytest.fixture
async def client(db_setup, storage):
    app.dependency_overrides[get_storage] = lambda: storage
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
