"""Request-fatal LFS errors and their rendering as ErrorResponse bodies."""
from fastapi import Request
from fastapi.responses import JSONResponse

from lfs_batch.api.schemas import LFS_MEDIA_TYPE, ErrorResponse, to_wire

LFS_HEADERS = {"X-Content-Type-Options": "nosniff"}


class LFSJSONResponse(JSONResponse):
    media_type = LFS_MEDIA_TYPE

    def __init__(self, content, status_code: int = 200, headers: dict | None = None, **kwargs) -> None:
        super().__init__(content, status_code=status_code, headers={**LFS_HEADERS, **(headers or {})}, **kwargs)


class LFSHTTPError(Exception):
    """Abort the whole batch request with a top-level ErrorResponse."""

    def __init__(
        self,
        status_code: int,
        message: str,
        documentation_url: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.documentation_url = documentation_url
        self.headers = headers


async def lfs_error_handler(request: Request, exc: LFSHTTPError) -> LFSJSONResponse:
    body = ErrorResponse(
        message=exc.message,
        documentation_url=exc.documentation_url,
        request_id=getattr(request.state, "request_id", None),
    )
    return LFSJSONResponse(to_wire(body), status_code=exc.status_code, headers=exc.headers)
