"""S3 storage gateway: HeadObject for stat, presigned GET/PUT via boto3. Works against AWS and S3-compatible endpoints."""
from __future__ import annotations

import logging

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from lfs_batch.core.config import Settings, get_settings, is_amazon_endpoint
from lfs_batch.services.storage.base import ObjectNotFound, StorageError, StorageGateway

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = ("404", "NoSuchKey", "NotFound")


def _get_client(settings: Settings):
    access_key_id, secret_access_key, session_token = settings.storage_credentials()
    endpoint = settings.resolved_endpoint()
    amazon = is_amazon_endpoint(endpoint)
    s3_options = {"addressing_style": "virtual" if amazon else "path"}
    endpoint_url: str | None = settings.endpoint_url()
    if settings.s3_accelerate and amazon:
        # Let botocore pick s3-accelerate.amazonaws.com; a custom endpoint_url disables acceleration
        s3_options["use_accelerate_endpoint"] = True
        endpoint_url = None
    cfg = Config(
        signature_version="s3v4",
        retries={"max_attempts": 3, "mode": "standard"},
        s3=s3_options,
    )
    return boto3.client(
        "s3",
        endpoint_url=endpoint_url,
        region_name=settings.aws_region or "us-east-1",
        aws_access_key_id=access_key_id,
        aws_secret_access_key=secret_access_key,
        aws_session_token=session_token,
        config=cfg,
    )


class S3Storage(StorageGateway):
    """S3 backend: stat via HeadObject; presigned GET/PUT via generate_presigned_url."""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        settings.validate_storage()
        self._bucket = settings.s3_bucket
        self._client = _get_client(settings)

    def stat(self, key: str) -> int:
        try:
            resp = self._client.head_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            error = e.response.get("Error", {})
            code = str(error.get("Code", ""))
            if code in _NOT_FOUND_CODES:
                raise ObjectNotFound("The specified key does not exist.") from e
            raise StorageError(error.get("Message") or str(e)) from e
        except BotoCoreError as e:
            raise StorageError(str(e)) from e
        return int(resp.get("ContentLength") or 0)

    def _presign(self, client_method: str, key: str, ttl_seconds: int) -> str:
        try:
            return self._client.generate_presigned_url(
                client_method,
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=ttl_seconds,
            )
        except (BotoCoreError, ClientError) as e:
            logger.warning("presign %s failed for key %s", client_method, key, exc_info=True)
            raise StorageError(str(e)) from e

    def presign_get(self, key: str, ttl_seconds: int) -> str:
        return self._presign("get_object", key, ttl_seconds)

    def presign_put(self, key: str, ttl_seconds: int) -> str:
        return self._presign("put_object", key, ttl_seconds)
