"""HTTP Basic credential parsing and constant-time comparison."""
import base64
import binascii
import hmac


def parse_basic_auth(header_value: str | None) -> tuple[str, str] | None:
    """Return (username, password) from an Authorization header, or None if absent or not Basic."""
    if not header_value:
        return None
    scheme, _, encoded = header_value.partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return None
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return username, password


def constant_time_equals(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode(), b.encode())
