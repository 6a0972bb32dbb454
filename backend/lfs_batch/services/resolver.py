"""Per-object batch decisions: validate the oid, reconcile with storage, mint a download or upload action."""
import logging

from lfs_batch.api.schemas import Action, Actions, BatchResponseObject, ObjectError
from lfs_batch.core.config import S3_PUT_LIMIT
from lfs_batch.core.metrics import record_batch_object, record_presigned_url_mint
from lfs_batch.services.oid_validation import is_valid_oid
from lfs_batch.services.storage.base import StorageError, StorageGateway

logger = logging.getLogger(__name__)

INVALID_OID = "oid must be a SHA-256 hash in lower case hexadecimal"
DOWNLOAD_WRONG_SIZE = "found object with wrong size"
UPLOAD_WRONG_SIZE = "existing object with wrong size"
UPLOAD_TOO_LARGE = "cannot upload objects larger than 5GB to S3 via LFS basic transfer adapter"


class ObjectResolver:
    """Decide the response entry for one requested object.

    Holds only read-only collaborators, so one instance can serve concurrent requests.
    Storage keys are ``prefix + oid``.
    """

    def __init__(
        self,
        storage: StorageGateway,
        ttl_seconds: int,
        prefix: str = "",
        max_upload_size: int = S3_PUT_LIMIT,
    ) -> None:
        self.storage = storage
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix
        self.max_upload_size = max_upload_size

    def key(self, oid: str) -> str:
        return self.prefix + oid

    def resolve(self, operation: str, oid: str, size: int) -> BatchResponseObject:
        out = BatchResponseObject(oid=oid, size=size)
        if not is_valid_oid(oid):
            out.error = ObjectError(code=422, message=INVALID_OID)
        elif operation == "download":
            self._download(out)
        elif operation == "upload":
            self._upload(out)
        _record(operation, out)
        return out

    def _download(self, out: BatchResponseObject) -> None:
        key = self.key(out.oid)
        try:
            stored_size = self.storage.stat(key)
        except StorageError as e:
            logger.debug("download lookup failed for %s: %s", key, e)
            out.error = ObjectError(code=404, message=str(e) or "object not found")
            return
        if stored_size != out.size:
            out.error = ObjectError(code=422, message=DOWNLOAD_WRONG_SIZE)
        # The stored size is authoritative; the client verifies bytes against it
        out.size = stored_size
        action = self._mint(out, "GET", key)
        if action is not None:
            out.actions = Actions(download=action)

    def _upload(self, out: BatchResponseObject) -> None:
        key = self.key(out.oid)
        try:
            stored_size = self.storage.stat(key)
        except StorageError as e:
            # Missing and unreachable look the same here; fall through to a fresh upload
            logger.debug("upload lookup for %s: %s", key, e)
        else:
            if stored_size != out.size:
                out.error = ObjectError(code=422, message=UPLOAD_WRONG_SIZE)
            return
        if out.size > self.max_upload_size:
            out.error = ObjectError(code=422, message=UPLOAD_TOO_LARGE)
            return
        action = self._mint(out, "PUT", key)
        if action is not None:
            out.actions = Actions(upload=action)

    def _mint(self, out: BatchResponseObject, method: str, key: str) -> Action | None:
        """Presign key; a signing failure becomes a 500 on this object only."""
        presign = self.storage.presign_get if method == "GET" else self.storage.presign_put
        try:
            href = presign(key, self.ttl_seconds)
        except StorageError as e:
            logger.warning("could not presign %s for %s", method, key, exc_info=True)
            out.error = ObjectError(code=500, message=f"could not sign {method} URL: {e}")
            return None
        record_presigned_url_mint(method)
        return Action(href=href, expires_in=self.ttl_seconds)


def _record(operation: str, out: BatchResponseObject) -> None:
    if out.error is not None:
        result = f"error_{out.error.code}"
    elif out.actions is not None:
        result = "action"
    else:
        result = "noop"
    record_batch_object(operation, result)
