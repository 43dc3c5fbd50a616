"""Batch serializer — compact JSON array with optional gzip compression."""

import gzip
import json

GZIP_MAGIC = b"\x1f\x8b"


def serialize_batch(records: list[dict], compress: bool = True) -> bytes:
    """Serialize records to a compact JSON array, gzip-compressed when *compress*."""
    payload = json.dumps(records, separators=(",", ":")).encode("utf-8")
    if compress:
        return gzip.compress(payload)
    return payload


def deserialize_batch(data: bytes) -> list[dict]:
    """Reverse *serialize_batch*, detecting compression from the gzip magic."""
    if data[:2] == GZIP_MAGIC:
        data = gzip.decompress(data)
    return json.loads(data)
