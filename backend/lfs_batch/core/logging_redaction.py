"""Redact sensitive data from structured logs. Never log Basic credentials, bearer tokens or storage keys."""
import re
from typing import Any

# Keys (case-insensitive) that must be redacted in dicts
REDACT_KEYS = frozenset({
    "password", "pass", "token", "secret", "authorization", "lfs-authenticate",
    "cookie", "access_key", "api_key", "signature", "credential",
})

_PRESIGNED_QUERY = re.compile(r"([?&](?:X-Amz-Signature|X-Amz-Credential|X-Amz-Security-Token|Signature)=)[^&\s]+", re.IGNORECASE)


def _redact_key(key: str) -> bool:
    k = key.lower()
    return any(r in k for r in REDACT_KEYS)


def redact_for_log(obj: Any) -> Any:
    """Return a copy of obj safe for logging: sensitive keys replaced with '[REDACTED]'."""
    if obj is None:
        return None
    if isinstance(obj, dict):
        return {
            k: "[REDACTED]" if isinstance(k, str) and _redact_key(k) else redact_for_log(v)
            for k, v in obj.items()
        }
    if isinstance(obj, (list, tuple)):
        return type(obj)(redact_for_log(x) for x in obj)
    if isinstance(obj, str):
        if _looks_like_secret(obj):
            return "[REDACTED]"
        return _PRESIGNED_QUERY.sub(r"\1[REDACTED]", obj)
    return obj


def _looks_like_secret(s: str) -> bool:
    """Heuristic: HTTP auth header values and GitHub tokens."""
    lowered = s.lower()
    if lowered.startswith("bearer ") or lowered.startswith("basic "):
        return True
    if re.match(r"^(ghp|gho|ghu|ghs|github_pat)_[A-Za-z0-9_]{20,}$", s):
        return True
    return False
