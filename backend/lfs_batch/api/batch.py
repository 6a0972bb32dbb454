"""Batch API: POST /objects/batch. Authenticate, parse, resolve every object in request order."""
import asyncio

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from lfs_batch.api.errors import LFSHTTPError, LFSJSONResponse
from lfs_batch.api.schemas import BATCH_DOC_URL, BatchRequest, BatchResponse, BatchResponseObject, to_wire
from lfs_batch.core.config import Settings, get_settings
from lfs_batch.core.deps import get_resolver, require_lfs_auth
from lfs_batch.services.resolver import ObjectResolver

router = APIRouter(tags=["batch"])


async def _parse_batch_request(request: Request) -> BatchRequest:
    body = await request.body()
    try:
        return BatchRequest.model_validate_json(body)
    except ValidationError as e:
        # git-lfs reference server answers an unrecognised batch body with 404
        raise LFSHTTPError(404, "could not parse request", documentation_url=BATCH_DOC_URL) from e


async def resolve_all(
    resolver: ObjectResolver,
    batch: BatchRequest,
    concurrency: int,
) -> list[BatchResponseObject]:
    """Resolve objects concurrently in the threadpool; gather keeps request order."""
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def _one(oid: str, size: int) -> BatchResponseObject:
        async with semaphore:
            return await run_in_threadpool(resolver.resolve, batch.operation, oid, size)

    return list(await asyncio.gather(*(_one(o.oid, o.size) for o in batch.objects)))


@router.post(
    "/objects/batch",
    response_class=LFSJSONResponse,
    dependencies=[Depends(require_lfs_auth)],
)
async def batch(
    request: Request,
    resolver: ObjectResolver = Depends(get_resolver),
    settings: Settings = Depends(get_settings),
):
    req = await _parse_batch_request(request)
    request.state.lfs_operation = req.operation
    request.state.object_count = len(req.objects)
    objects = await resolve_all(resolver, req, settings.batch_concurrency)
    return LFSJSONResponse(to_wire(BatchResponse(objects=objects)))
