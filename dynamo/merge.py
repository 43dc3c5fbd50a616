"""Metadata merge — JSON merge-patch applied to every record before enqueue."""

from collections.abc import Mapping, MutableMapping


def merge_patch(target: MutableMapping, patch: Mapping) -> MutableMapping:
    """Apply *patch* to *target* in place (RFC 7396) and return *target*.

    Patch values overwrite same-named fields, nested mappings are merged
    recursively and a ``None`` value removes the field. Fields the patch
    does not mention are left alone.
    """
    for key, value in patch.items():
        if value is None:
            target.pop(key, None)
        elif isinstance(value, Mapping):
            current = target.get(key)
            if not isinstance(current, MutableMapping):
                current = {}
            target[key] = merge_patch(current, value)
        else:
            target[key] = value
    return target


def stamp_record(record: MutableMapping, metadata: Mapping, now_ms: int) -> MutableMapping:
    """Merge the common metadata into *record* and set its send-time timestamp."""
    merge_patch(record, metadata)
    record["timestamp"] = now_ms
    return record
