"""Storage gateway interface: stat plus presigned get/put. Implementations: S3 (boto3); tests use an in-memory fake."""
from abc import ABC, abstractmethod


class StorageError(Exception):
    """Storage lookup or signing failed."""


class ObjectNotFound(StorageError):
    """No object stored under the requested key."""


class StorageGateway(ABC):
    """Narrow capability over an object store: existence/size lookup and presigned URLs for one key."""

    @abstractmethod
    def stat(self, key: str) -> int:
        """Return the stored size in bytes. Raise ObjectNotFound if missing, StorageError on other failures."""
        ...

    @abstractmethod
    def presign_get(self, key: str, ttl_seconds: int) -> str:
        """Return a URL allowing a GET of key for ttl_seconds."""
        ...

    @abstractmethod
    def presign_put(self, key: str, ttl_seconds: int) -> str:
        """Return a URL allowing a PUT to key for ttl_seconds."""
        ...
