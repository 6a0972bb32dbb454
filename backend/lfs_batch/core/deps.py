"""FastAPI dependencies: storage gateway, authorizer, resolver, Basic-auth gate."""
import logging

from fastapi import Depends, Header, Request
from starlette.concurrency import run_in_threadpool

from lfs_batch.api.errors import LFSHTTPError
from lfs_batch.core.config import Settings, get_settings
from lfs_batch.core.metrics import record_auth_failure
from lfs_batch.core.security import parse_basic_auth
from lfs_batch.services.auth import AuthorizationError, Authorizer, get_authorizer
from lfs_batch.services.resolver import ObjectResolver
from lfs_batch.services.storage import StorageGateway, get_storage

logger = logging.getLogger(__name__)

LFS_CHALLENGE = {"LFS-Authenticate": 'Basic realm="Git LFS"'}


def get_storage_gateway() -> StorageGateway:
    return get_storage()


def get_batch_authorizer() -> Authorizer | None:
    return get_authorizer()


def get_resolver(
    storage: StorageGateway = Depends(get_storage_gateway),
    settings: Settings = Depends(get_settings),
) -> ObjectResolver:
    return ObjectResolver(
        storage,
        ttl_seconds=settings.url_ttl_seconds,
        prefix=settings.s3_prefix,
        max_upload_size=settings.max_upload_size,
    )


async def require_lfs_auth(
    request: Request,
    authorizer: Authorizer | None = Depends(get_batch_authorizer),
    authorization: str | None = Header(None),
) -> None:
    """Reject with 401 and an LFS-Authenticate challenge unless credentials pass the configured strategy."""
    if authorizer is None:
        return
    credentials = parse_basic_auth(authorization)
    if credentials is None:
        record_auth_failure()
        raise LFSHTTPError(401, "Unauthorized", headers=LFS_CHALLENGE)
    identity, secret = credentials
    try:
        # Strategies may do blocking network I/O (GitHub lookup)
        await run_in_threadpool(authorizer.validate, identity, secret)
    except AuthorizationError as e:
        record_auth_failure()
        logger.info("batch auth rejected: %s", e)
        raise LFSHTTPError(401, f"Unauthorized: {e}", headers=LFS_CHALLENGE) from e
    request.state.lfs_identity = identity
