"""Object identifier validation: LFS oids are lower-case hex SHA-256 digests."""
import re

_OID_RE = re.compile(r"[a-f0-9]{64}")


def is_valid_oid(oid: str) -> bool:
    return isinstance(oid, str) and _OID_RE.fullmatch(oid) is not None
