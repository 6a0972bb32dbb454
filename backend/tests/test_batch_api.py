"""POST /objects/batch end to end: headers, auth gate, parse errors, per-object results in request order."""
import pytest
from httpx import AsyncClient

from lfs_batch.api.schemas import BATCH_DOC_URL, LFS_MEDIA_TYPE

OID_A = "a" * 64
OID_B = "b" * 64
OID_C = "c" * 64
PREFIX = "lfs/"
TTL = 3600


def _batch(operation: str, *objects: tuple[str, int]) -> dict:
    return {
        "operation": operation,
        "transfers": ["basic"],
        "ref": {"name": "refs/heads/main"},
        "objects": [{"oid": oid, "size": size} for oid, size in objects],
    }


async def _post(client: AsyncClient, body, **kwargs):
    return await client.post(
        "/objects/batch",
        json=body,
        headers={"Accept": LFS_MEDIA_TYPE, "Content-Type": LFS_MEDIA_TYPE},
        **kwargs,
    )


@pytest.mark.asyncio
async def test_download_missing_object_is_404_entry(client: AsyncClient):
    r = await _post(client, _batch("download", (OID_A, 10)))
    assert r.status_code == 200
    assert r.headers["content-type"] == LFS_MEDIA_TYPE
    assert r.headers["x-content-type-options"] == "nosniff"
    data = r.json()
    assert data["transfer"] == "basic"
    assert len(data["objects"]) == 1
    obj = data["objects"][0]
    assert obj["oid"] == OID_A
    assert obj["size"] == 10
    assert obj["error"]["code"] == 404
    assert "actions" not in obj


@pytest.mark.asyncio
async def test_download_wrong_size_returns_stored_size_error_and_href(client: AsyncClient, storage):
    storage.objects[PREFIX + OID_A] = 20
    r = await _post(client, _batch("download", (OID_A, 10)))
    assert r.status_code == 200
    obj = r.json()["objects"][0]
    assert obj["size"] == 20
    assert obj["error"] == {"code": 422, "message": "found object with wrong size"}
    assert obj["actions"]["download"]["href"].startswith(f"https://storage.test/bucket/{PREFIX}{OID_A}")
    assert obj["actions"]["download"]["expires_in"] == TTL


@pytest.mark.asyncio
async def test_download_existing_object_has_only_download_action(client: AsyncClient, storage):
    storage.objects[PREFIX + OID_A] = 10
    r = await _post(client, _batch("download", (OID_A, 10)))
    obj = r.json()["objects"][0]
    assert "error" not in obj
    assert "authenticated" not in obj
    assert set(obj["actions"]) == {"download"}
    assert set(obj["actions"]["download"]) == {"href", "expires_in"}


@pytest.mark.asyncio
async def test_upload_mixed_batch_preserves_order(client: AsyncClient, storage):
    storage.objects[PREFIX + OID_B] = 5  # already uploaded
    storage.objects[PREFIX + OID_C] = 6  # uploaded with a different size
    body = _batch(
        "upload",
        (OID_A, 1),
        ("not-an-oid", 2),
        (OID_B, 5),
        (OID_C, 7),
        ("d" * 64, 5 * 10**9),
    )
    r = await _post(client, body)
    assert r.status_code == 200
    objs = r.json()["objects"]
    assert [o["oid"] for o in objs] == [o["oid"] for o in body["objects"]]
    assert [o["size"] for o in objs] == [1, 2, 5, 7, 5 * 10**9]

    assert objs[0]["actions"]["upload"]["expires_in"] == TTL
    assert "error" not in objs[0]
    assert objs[1]["error"]["code"] == 422
    assert "actions" not in objs[2] and "error" not in objs[2]
    assert objs[3]["error"] == {"code": 422, "message": "existing object with wrong size"}
    assert "actions" not in objs[3]
    assert objs[4]["error"]["code"] == 422
    assert "5GB" in objs[4]["error"]["message"]
    # Only the valid oids reached storage
    assert "not-an-oid" not in "".join(storage.stat_calls)


@pytest.mark.asyncio
async def test_order_preserved_for_many_objects(client: AsyncClient, storage):
    oids = [f"{i:064x}" for i in range(40)]
    for i, oid in enumerate(oids):
        if i % 3 == 0:
            storage.objects[PREFIX + oid] = i
    r = await _post(client, _batch("download", *[(oid, i) for i, oid in enumerate(oids)]))
    objs = r.json()["objects"]
    assert [o["oid"] for o in objs] == oids
    for i, o in enumerate(objs):
        if i % 3 == 0:
            assert "download" in o["actions"]
        else:
            assert o["error"]["code"] == 404


@pytest.mark.asyncio
async def test_empty_batch_returns_empty_list(client: AsyncClient):
    r = await _post(client, _batch("upload"))
    assert r.status_code == 200
    assert r.json()["objects"] == []


@pytest.mark.asyncio
async def test_null_objects_treated_as_empty(client: AsyncClient):
    r = await _post(client, {"operation": "download", "objects": None})
    assert r.status_code == 200
    assert r.json()["objects"] == []


@pytest.mark.asyncio
async def test_null_object_entry_is_422_entry(client: AsyncClient, storage):
    r = await _post(client, {"operation": "upload", "objects": [None]})
    assert r.status_code == 200
    obj = r.json()["objects"][0]
    assert (obj["oid"], obj["size"]) == ("", 0)
    assert obj["error"]["code"] == 422
    assert storage.stat_calls == []


@pytest.mark.asyncio
async def test_null_oid_and_size_are_zero_values(client: AsyncClient):
    r = await _post(client, {"operation": "download", "objects": [{"oid": None, "size": None}]})
    assert r.status_code == 200
    obj = r.json()["objects"][0]
    assert (obj["oid"], obj["size"]) == ("", 0)
    assert obj["error"]["code"] == 422


@pytest.mark.asyncio
async def test_null_operation_echoes_objects(client: AsyncClient, storage):
    r = await _post(client, {"operation": None, "objects": [{"oid": OID_A, "size": 3}]})
    assert r.status_code == 200
    assert r.json()["objects"] == [{"oid": OID_A, "size": 3}]
    assert storage.stat_calls == []


@pytest.mark.asyncio
async def test_null_body_is_empty_batch(client: AsyncClient):
    r = await client.post("/objects/batch", content=b"null", headers={"Content-Type": LFS_MEDIA_TYPE})
    assert r.status_code == 200
    assert r.json() == {"transfer": "basic", "objects": []}


@pytest.mark.asyncio
async def test_unknown_operation_echoes_objects(client: AsyncClient, storage):
    r = await _post(client, _batch("verify", (OID_A, 3)))
    assert r.status_code == 200
    assert r.json()["objects"] == [{"oid": OID_A, "size": 3}]
    assert storage.stat_calls == []


@pytest.mark.asyncio
async def test_extra_request_fields_are_ignored(client: AsyncClient):
    body = _batch("upload", (OID_A, 1))
    body["hash_algo"] = "sha256"
    body["objects"][0]["x-extra"] = True
    r = await _post(client, body)
    assert r.status_code == 200
    assert "upload" in r.json()["objects"][0]["actions"]


@pytest.mark.asyncio
async def test_malformed_json_is_404_with_doc_url(client: AsyncClient):
    r = await client.post(
        "/objects/batch",
        content=b'{"operation": "download", "objects": [',
        headers={"Content-Type": LFS_MEDIA_TYPE},
    )
    assert r.status_code == 404
    assert r.headers["content-type"] == LFS_MEDIA_TYPE
    assert r.headers["x-content-type-options"] == "nosniff"
    data = r.json()
    assert data["message"] == "could not parse request"
    assert data["documentation_url"] == BATCH_DOC_URL
    assert data["request_id"] == r.headers["x-request-id"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        b"",
        b"[]",
        b'{"operation": "download", "objects": [{"oid": "' + b"a" * 64 + b'", "size": "10"}]}',
        b'{"operation": 1, "objects": []}',
        b'{"operation": "upload", "objects": {}}',
    ],
)
async def test_wrong_shapes_are_404(client: AsyncClient, body):
    r = await client.post("/objects/batch", content=body, headers={"Content-Type": LFS_MEDIA_TYPE})
    assert r.status_code == 404
    assert r.json()["message"] == "could not parse request"


@pytest.mark.asyncio
async def test_missing_auth_is_401_with_challenge(client: AsyncClient, storage):
    r = await _post(client, _batch("download", (OID_A, 1)), auth=None)
    assert r.status_code == 401
    assert r.headers["lfs-authenticate"] == 'Basic realm="Git LFS"'
    assert r.headers["content-type"] == LFS_MEDIA_TYPE
    assert r.json()["message"] == "Unauthorized"
    assert storage.stat_calls == []


@pytest.mark.asyncio
async def test_wrong_password_is_401_with_reason(client: AsyncClient, storage):
    r = await _post(client, _batch("download", (OID_A, 1)), auth=("alice", "nope"))
    assert r.status_code == 401
    assert r.headers["lfs-authenticate"] == 'Basic realm="Git LFS"'
    assert r.json()["message"] == "Unauthorized: invalid credentials"
    assert storage.stat_calls == []


@pytest.mark.asyncio
async def test_auth_checked_before_body_is_parsed(client: AsyncClient):
    r = await client.post(
        "/objects/batch",
        content=b"not json",
        headers={"Authorization": "Bearer abc"},
        auth=None,
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_auth_disabled_allows_anonymous(anon_client: AsyncClient):
    r = await _post(anon_client, _batch("upload", (OID_A, 1)))
    assert r.status_code == 200
    assert "upload" in r.json()["objects"][0]["actions"]


@pytest.mark.asyncio
async def test_presign_failure_does_not_fail_batch(client: AsyncClient, storage):
    storage.presign_error = "signer misconfigured"
    r = await _post(client, _batch("upload", (OID_A, 1), ("bad", 1)))
    assert r.status_code == 200
    objs = r.json()["objects"]
    assert objs[0]["error"]["code"] == 500
    assert objs[1]["error"]["code"] == 422


@pytest.mark.asyncio
async def test_healthz(client: AsyncClient):
    r = await client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_metrics_disabled_by_default(client: AsyncClient):
    r = await client.get("/metrics")
    assert r.status_code == 404
