"""Pytest fixtures: in-memory storage gateway, settings, authorizer, test client."""
import pytest
from httpx import ASGITransport, AsyncClient

from lfs_batch.main import app
from lfs_batch.core.config import Settings, get_settings
from lfs_batch.core.deps import get_batch_authorizer, get_storage_gateway
from lfs_batch.services.auth import StaticCredentials
from lfs_batch.services.storage.base import ObjectNotFound, StorageError, StorageGateway

PREFIX = "lfs/"
TTL = 3600


class MemoryStorage(StorageGateway):
    """Dict-backed gateway. Records every key passed to stat and presign."""

    def __init__(self, objects: dict[str, int] | None = None) -> None:
        self.objects = dict(objects or {})
        self.stat_calls: list[str] = []
        self.presign_calls: list[tuple[str, str, int]] = []
        self.lookup_error: str | None = None
        self.presign_error: str | None = None

    def stat(self, key: str) -> int:
        self.stat_calls.append(key)
        if self.lookup_error:
            raise StorageError(self.lookup_error)
        if key not in self.objects:
            raise ObjectNotFound("The specified key does not exist.")
        return self.objects[key]

    def _presign(self, method: str, key: str, ttl_seconds: int) -> str:
        self.presign_calls.append((method, key, ttl_seconds))
        if self.presign_error:
            raise StorageError(self.presign_error)
        return f"https://storage.test/bucket/{key}?method={method}&X-Amz-Expires={ttl_seconds}"

    def presign_get(self, key: str, ttl_seconds: int) -> str:
        return self._presign("GET", key, ttl_seconds)

    def presign_put(self, key: str, ttl_seconds: int) -> str:
        return self._presign("PUT", key, ttl_seconds)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        s3_endpoint="storage.test",
        s3_bucket="bucket",
        s3_prefix=PREFIX,
        url_ttl_seconds=TTL,
        batch_concurrency=4,
        auth_mode="static",
        lfs_user="alice",
        lfs_pass="s3cret",
        log_json=False,
    )


@pytest.fixture
def authorizer():
    return StaticCredentials("alice", "s3cret")


@pytest.fixture
async def client(storage, settings, authorizer):
    app.dependency_overrides[get_storage_gateway] = lambda: storage
    app.dependency_overrides[get_batch_authorizer] = lambda: authorizer
    app.dependency_overrides[get_settings] = lambda: settings
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        auth=("alice", "s3cret"),
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def anon_client(storage, settings):
    """Client against a server with authorization disabled."""
    app.dependency_overrides[get_storage_gateway] = lambda: storage
    app.dependency_overrides[get_batch_authorizer] = lambda: None
    app.dependency_overrides[get_settings] = lambda: settings
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
