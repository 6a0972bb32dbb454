"""Storage gateway factory. One S3 client per process; boto3 clients are thread-safe."""
from functools import lru_cache

from lfs_batch.services.storage.base import ObjectNotFound, StorageError, StorageGateway

__all__ = ["ObjectNotFound", "StorageError", "StorageGateway", "get_storage"]


@lru_cache
def get_storage() -> StorageGateway:
    """Return the configured storage gateway."""
    from lfs_batch.services.storage.s3 import S3Storage
    return S3Storage()
