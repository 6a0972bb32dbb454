"""Prometheus metrics: request count by route/status, latency, batch objects, presigned-url mints, auth failures."""
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total requests",
    ["method", "path", "status_class"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "Request latency",
    ["method", "path"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)
BATCH_OBJECTS_TOTAL = Counter(
    "lfs_batch_objects_total",
    "Objects resolved by the batch endpoint",
    ["operation", "result"],  # action | noop | error_<code>
)
PRESIGNED_URL_MINT_TOTAL = Counter(
    "lfs_presigned_url_mint_total",
    "Presigned URL mints",
    ["method"],  # GET | PUT
)
AUTH_FAILURES_TOTAL = Counter(
    "lfs_auth_failures_total",
    "Rejected batch requests (missing or invalid credentials)",
)

_KNOWN_PATHS = frozenset({"/objects/batch", "/healthz", "/metrics"})


def _status_class(status: int) -> str:
    if status < 200:
        return "1xx"
    if status < 300:
        return "2xx"
    if status < 400:
        return "3xx"
    if status < 500:
        return "4xx"
    return "5xx"


def record_request(method: str, path: str, status_code: int, latency_seconds: float) -> None:
    # Unknown paths collapse to one label to avoid high cardinality from scanners
    path = path if path in _KNOWN_PATHS else "other"
    sc = _status_class(status_code)
    REQUEST_COUNT.labels(method=method, path=path, status_class=sc).inc()
    REQUEST_LATENCY.labels(method=method, path=path).observe(latency_seconds)


def record_batch_object(operation: str, result: str) -> None:
    if operation not in ("download", "upload"):
        operation = "other"
    BATCH_OBJECTS_TOTAL.labels(operation=operation, result=result).inc()


def record_presigned_url_mint(method: str) -> None:
    PRESIGNED_URL_MINT_TOTAL.labels(method=method).inc()


def record_auth_failure() -> None:
    AUTH_FAILURES_TOTAL.inc()


def get_metrics() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST
