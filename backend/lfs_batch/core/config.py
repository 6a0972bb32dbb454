"""Application settings."""
from functools import lru_cache
from urllib.parse import urlsplit

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Largest object a single unsigned S3 PUT accepts (5 GB - 1 byte).
S3_PUT_LIMIT = 5 * 10**9 - 1


class ConfigError(ValueError):
    """Raised at startup when settings cannot be resolved into a working server."""


def is_amazon_endpoint(endpoint: str) -> bool:
    host = _endpoint_host(endpoint)
    return host == "s3.amazonaws.com" or host.endswith(".amazonaws.com") or host.endswith(".amazonaws.com.cn")


def _endpoint_host(endpoint: str) -> str:
    if "://" in endpoint:
        return (urlsplit(endpoint).hostname or "").lower()
    return endpoint.split("/", 1)[0].rsplit(":", 1)[0].lower()


class Settings(BaseSettings):
    """App config from env."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Git LFS Batch Server"
    # Structured logging: set LOG_JSON=1 for one-JSON-object-per-line (CloudWatch, etc.)
    log_json: bool = False
    log_level: str = "INFO"
    metrics_enabled: bool = False

    # Local listener (python -m lfs_batch)
    lfs_host: str = "127.0.0.1"
    lfs_port: int = 5000

    # Storage. Endpoint is host[:port] or a full URL; empty means s3.<aws_region>.amazonaws.com
    s3_endpoint: str = ""
    s3_no_ssl: bool = False
    s3_bucket: str = Field("", validation_alias=AliasChoices("s3_bucket", "lfs_bucket"))
    s3_accelerate: bool = False
    s3_prefix: str = ""
    aws_region: str | None = None
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    aws_session_token: str | None = None

    # Presigned URL lifetime, one hour unless overridden
    url_ttl_seconds: int = 3600
    max_upload_size: int = S3_PUT_LIMIT
    # Objects resolved in parallel within one batch request
    batch_concurrency: int = 8

    # Auth: none | static | github_org
    auth_mode: str = "static"
    lfs_user: str | None = None
    lfs_pass: str | None = None
    github_org: str | None = None
    github_api_url: str = "https://api.github.com"
    github_timeout_seconds: float = 10.0

    def resolved_endpoint(self) -> str:
        if self.s3_endpoint:
            return self.s3_endpoint
        if not self.aws_region:
            raise ConfigError("endpoint required")
        return f"s3.{self.aws_region}.amazonaws.com"

    def endpoint_url(self) -> str:
        """Endpoint as a URL boto3 accepts (scheme from s3_no_ssl unless given explicitly)."""
        endpoint = self.resolved_endpoint()
        if "://" in endpoint:
            return endpoint
        scheme = "http" if self.s3_no_ssl else "https"
        return f"{scheme}://{endpoint}"

    def storage_credentials(self) -> tuple[str, str, str | None]:
        """Return (access key id, secret key, session token); raise ConfigError if incomplete."""
        endpoint = self.resolved_endpoint()
        if self.aws_access_key_id and self.aws_secret_access_key:
            return self.aws_access_key_id, self.aws_secret_access_key, self.aws_session_token
        if not is_amazon_endpoint(endpoint):
            raise ConfigError(f"access key & id required for {endpoint}")
        if not self.aws_access_key_id:
            raise ConfigError(f"AWS access key ID required for {endpoint}")
        raise ConfigError(f"AWS secret access key required for {endpoint}")

    def validate_storage(self) -> None:
        self.storage_credentials()
        if not self.s3_bucket:
            raise ConfigError("bucket required")
        if self.url_ttl_seconds <= 0:
            raise ConfigError("url_ttl_seconds must be positive")


@lru_cache
def get_settings() -> Settings:
    return Settings()
