"""Tests for the metadata merge-patch."""

from dynamo.merge import merge_patch, stamp_record


def test_patch_overwrites_existing_fields():
    record = {"message": "hi", "status": "ERROR", "hostname": "spoofed"}
    merge_patch(record, {"status": "INFO", "hostname": "real"})
    assert record == {"message": "hi", "status": "INFO", "hostname": "real"}


def test_unmentioned_fields_untouched():
    record = {"message": "hi", "service": "storedog", "extra": [1, 2]}
    merge_patch(record, {"ddsource": "dynamo"})
    assert record["service"] == "storedog"
    assert record["extra"] == [1, 2]
    assert record["ddsource"] == "dynamo"


def test_nested_mappings_deep_merge():
    record = {"http": {"method": "GET", "status": 200}}
    merge_patch(record, {"http": {"status": 500, "url": "/x"}})
    assert record == {"http": {"method": "GET", "status": 500, "url": "/x"}}


def test_nested_patch_replaces_scalar():
    record = {"http": "GET /"}
    merge_patch(record, {"http": {"method": "GET"}})
    assert record == {"http": {"method": "GET"}}


def test_none_removes_field():
    record = {"message": "hi", "secret": "x"}
    merge_patch(record, {"secret": None})
    assert record == {"message": "hi"}


def test_stamp_record_sets_timestamp_after_merge():
    record = {"message": "hi", "timestamp": 1}
    stamp_record(record, {"status": "INFO"}, 1700000000123)
    assert record["timestamp"] == 1700000000123
    assert record["status"] == "INFO"
