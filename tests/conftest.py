"""pytest configuration and fixtures."""

import os
from collections.abc import Iterator

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

# Set required environment variables for testing before any imports
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("MONGODB_CONNECTION_STRING", "mongodb://localhost:27017/?replicaSet=rs0")

from content_api.api.main import app  # noqa: E402
from content_api.auth.config import AuthConfig, get_auth_config  # noqa: E402
from content_api.auth.dependencies import get_admin_repository, get_current_admin  # noqa: E402
from content_api.auth.security import hash_password  # noqa: E402
from content_api.mongodb.gridfs_service import (  # noqa: E402
    ALLOWED_IMAGE_TYPES,
    ImageFolder,
    ImageUploadError,
    StoredImage,
    get_image_storage,
)
from content_api.mongodb.schemas import AdminDocument  # noqa: E402
from content_api.mongodb.store import get_document_store  # noqa: E402

from tests.memory_store import MemoryDocumentStore  # noqa: E402

TEST_AUTH_CONFIG = AuthConfig(jwt_secret="test-secret", jwt_expires_hours=1)


class FakeImageStorage:
    """Image storage keeping uploads in memory and recording deletions."""

    def __init__(self) -> None:
        self.files: dict[str, tuple[StoredImage, bytes]] = {}
        self.deleted: list[str] = []

    async def upload_image(
        self,
        data: bytes,
        filename: str,
        content_type: str,
        folder: ImageFolder = ImageFolder.GENERAL,
    ) -> StoredImage:
        if content_type not in ALLOWED_IMAGE_TYPES:
            msg = "Only image files are allowed"
            raise ImageUploadError(msg)
        if not data:
            msg = "No image file provided"
            raise ImageUploadError(msg)
        stored = StoredImage(
            file_id=str(ObjectId()),
            filename=f"{folder}_{filename}",
            folder=folder,
            content_type=content_type,
            size_bytes=len(data),
        )
        self.files[stored.file_id] = (stored, data)
        return stored

    async def download_bytes(self, file_id: str) -> tuple[StoredImage, bytes] | None:
        return self.files.get(file_id)

    async def delete_image_quietly(self, file_id: str | None) -> None:
        if file_id:
            self.deleted.append(file_id)
            self.files.pop(file_id, None)


class FakeAdminRepository:
    def __init__(self) -> None:
        self.admins: dict[str, AdminDocument] = {}

    def add(self, email: str, password: str) -> AdminDocument:
        admin = AdminDocument(id=ObjectId(), email=email, password_hash=hash_password(password))
        self.admins[str(admin.id)] = admin
        return admin

    async def get_admin(self, admin_id: str) -> AdminDocument | None:
        return self.admins.get(admin_id)

    async def get_by_email(self, email: str) -> AdminDocument | None:
        for admin in self.admins.values():
            if admin.email == email.lower():
                return admin
        return None

    async def create_admin(self, email: str, password_hash: str) -> AdminDocument:
        admin = AdminDocument(id=ObjectId(), email=email.lower(), password_hash=password_hash)
        self.admins[str(admin.id)] = admin
        return admin


@pytest.fixture()
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture()
def images() -> FakeImageStorage:
    return FakeImageStorage()


@pytest.fixture()
def admins() -> FakeAdminRepository:
    return FakeAdminRepository()


@pytest.fixture()
def admin() -> AdminDocument:
    return AdminDocument(id=ObjectId(), email="admin@example.com", password_hash="unused")


def _install_overrides(store: MemoryDocumentStore, images: FakeImageStorage, admins: FakeAdminRepository) -> None:
    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_image_storage] = lambda: images
    app.dependency_overrides[get_admin_repository] = lambda: admins
    app.dependency_overrides[get_auth_config] = lambda: TEST_AUTH_CONFIG


@pytest.fixture()
def client(
    store: MemoryDocumentStore,
    images: FakeImageStorage,
    admins: FakeAdminRepository,
    admin: AdminDocument,
) -> Iterator[TestClient]:
    """Client whose requests are made as an authenticated admin."""
    _install_overrides(store, images, admins)
    app.dependency_overrides[get_current_admin] = lambda: admin
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def anonymous_client(
    store: MemoryDocumentStore,
    images: FakeImageStorage,
    admins: FakeAdminRepository,
) -> Iterator[TestClient]:
    """Client going through the real bearer token check."""
    _install_overrides(store, images, admins)
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()

