"""Pydantic schemas for the Git LFS batch API (git-lfs docs/api/batch.md)."""
from datetime import datetime, timezone

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    ValidationInfo,
    field_serializer,
    field_validator,
    model_validator,
)

LFS_MEDIA_TYPE = "application/vnd.git-lfs+json"
BATCH_DOC_URL = "https://github.com/git-lfs/git-lfs/blob/v2.12.0/docs/api/batch.md#requests"


def _config_ignore(**kwargs):
    # LFS clients send fields newer than this server knows about (hash_algo, ...)
    return ConfigDict(extra="ignore", **kwargs)


def _config_forbid(**kwargs):
    return ConfigDict(extra="forbid", **kwargs)


# ----- Request -----
# JSON null decodes to the field's zero value, the same as an omitted field.
class Ref(BaseModel):
    model_config = _config_ignore()
    name: StrictStr = ""

    @field_validator("name", mode="before")
    @classmethod
    def _null_name(cls, v):
        return "" if v is None else v


class RequestObject(BaseModel):
    model_config = _config_ignore()
    oid: StrictStr = ""
    size: StrictInt = 0

    @model_validator(mode="before")
    @classmethod
    def _null_object(cls, data):
        return {} if data is None else data

    @field_validator("oid", "size", mode="before")
    @classmethod
    def _null_as_zero(cls, v, info: ValidationInfo):
        if v is None:
            return 0 if info.field_name == "size" else ""
        return v


class BatchRequest(BaseModel):
    model_config = _config_ignore()
    operation: StrictStr = ""  # download | upload
    transfers: list[StrictStr] = Field(default_factory=list)  # informational; only basic is served
    ref: Ref | None = None
    objects: list[RequestObject] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _null_body(cls, data):
        return {} if data is None else data

    @field_validator("operation", mode="before")
    @classmethod
    def _null_operation(cls, v):
        return "" if v is None else v

    @field_validator("transfers", mode="before")
    @classmethod
    def _null_transfers(cls, v):
        if v is None:
            return []
        if isinstance(v, list):
            return ["" if t is None else t for t in v]
        return v

    @field_validator("objects", mode="before")
    @classmethod
    def _null_objects(cls, v):
        return [] if v is None else v


# ----- Response -----
class Action(BaseModel):
    model_config = _config_forbid()
    href: str
    header: dict[str, str] | None = None
    expires_in: int | None = None  # seconds from issuance
    expires_at: datetime | None = None

    @model_validator(mode="after")
    def _one_expiry(self):
        if (self.expires_in is None) == (self.expires_at is None):
            raise ValueError("exactly one of expires_in or expires_at must be set")
        return self

    @field_serializer("expires_at")
    def _rfc3339_seconds(self, value: datetime | None) -> str | None:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        text = value.replace(microsecond=0).isoformat()
        return text[:-6] + "Z" if text.endswith("+00:00") else text


class Actions(BaseModel):
    model_config = _config_forbid()
    download: Action | None = None
    upload: Action | None = None
    verify: "Actions | None" = None


Actions.model_rebuild()


class ObjectError(BaseModel):
    model_config = _config_forbid()
    code: int
    message: str


class BatchResponseObject(BaseModel):
    model_config = _config_forbid()
    oid: str
    size: int
    authenticated: bool | None = None
    actions: Actions | None = None
    error: ObjectError | None = None


class BatchResponse(BaseModel):
    model_config = _config_forbid()
    transfer: str | None = "basic"
    objects: list[BatchResponseObject] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    model_config = _config_forbid()
    message: str
    documentation_url: str | None = None
    request_id: str | None = None


def to_wire(model: BaseModel) -> dict:
    """JSON-ready dict with unset optional fields omitted."""
    return model.model_dump(mode="json", exclude_none=True)
