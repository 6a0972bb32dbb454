"""FastAPI app: request logging, LFS error rendering, batch router, health and metrics."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response

from lfs_batch.api.batch import router as batch_router
from lfs_batch.api.errors import LFSHTTPError, lfs_error_handler
from lfs_batch.core.config import get_settings
from lfs_batch.core.metrics import get_metrics
from lfs_batch.core.request_logging import RequestLoggingMiddleware, configure_logging
from lfs_batch.services.auth import get_authorizer
from lfs_batch.services.storage import get_storage

logger = logging.getLogger(__name__)

settings = get_settings()
configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Fail at startup, not on the first batch request, when storage or auth config is incomplete
    get_storage()
    authorizer = get_authorizer()
    logger.info("serving batch API (auth=%s, bucket=%s)", type(authorizer).__name__ if authorizer else "none", settings.s3_bucket)
    yield
    close = getattr(authorizer, "close", None)
    if close is not None:
        close()


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.add_middleware(RequestLoggingMiddleware)
app.add_exception_handler(LFSHTTPError, lfs_error_handler)

app.include_router(batch_router)


@app.get("/healthz")
async def healthz():
    """Liveness: no auth, no storage."""
    return {"status": "ok"}


@app.get("/metrics", response_class=Response)
async def metrics():
    """Prometheus metrics; enabled with METRICS_ENABLED=1."""
    if not get_settings().metrics_enabled:
        raise HTTPException(status_code=404, detail="Not Found")
    body, content_type = get_metrics()
    return Response(content=body, media_type=content_type)
