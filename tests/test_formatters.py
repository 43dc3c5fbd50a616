"""Tests for the Apache access and VPC flow line formatters."""

import re
from datetime import datetime, timedelta, timezone

from dynamo.formatters import (
    format_access_line,
    format_flow_line,
    random_access_line,
    random_card_number,
    random_flow_line,
)

ACCESS_RE = re.compile(
    r'^(\d{1,3}\.){3}\d{1,3} - \S+ \[\d{2}/[A-Z][a-z]{2}/\d{4}:\d{2}:\d{2}:\d{2} [+-]\d{4}\] '
    r'"(GET|POST) /\S+ HTTP/1\.1" \d{3} \d+$'
)


def test_format_access_line_layout():
    when = datetime(2024, 3, 5, 14, 7, 9, tzinfo=timezone.utc)
    line = format_access_line(
        "GET", 200, client_ip="10.0.0.1", username="alice", path="checkout", when=when,
    )
    assert line == '10.0.0.1 - alice [05/Mar/2024:14:07:09 +0000] "GET /checkout HTTP/1.1" 200 1024'


def test_format_flow_line_fields():
    end = datetime(2024, 3, 5, 14, 7, 9, tzinfo=timezone.utc)
    start = end - timedelta(seconds=10)
    line = format_flow_line(
        "REJECT", "OK", 22,
        src_ip="1.2.3.4", dst_ip="5.6.7.8", src_port=40000,
        packets=12, byte_count=900, start=start, end=end,
    )
    fields = line.split(" ")
    assert len(fields) == 14
    assert fields[:8] == [
        "2", "1234567890", "eni-sdvu4NphZxGvp1MDz", "1.2.3.4", "5.6.7.8", "40000", "22", "6",
    ]
    assert fields[8:10] == ["12", "900"]
    assert int(fields[11]) - int(fields[10]) == 10
    assert fields[12:] == ["REJECT", "OK"]


def test_random_access_line_matches_layout():
    for status in (200, 500, 504):
        line = random_access_line("GET" if status != 504 else "POST", status)
        assert ACCESS_RE.match(line), line
        assert f'" {status} 1024' in line


def test_random_flow_line_ranges():
    for _ in range(50):
        fields = random_flow_line("ACCEPT", "OK", 443).split(" ")
        assert len(fields) == 14
        assert 30000 <= int(fields[5]) < 78000
        assert fields[6] == "443"
        assert 5 <= int(fields[8]) < 1000
        assert 230 <= int(fields[9]) < 9000
        assert 5 <= int(fields[11]) - int(fields[10]) < 30
        assert fields[12:] == ["ACCEPT", "OK"]


def test_random_card_number_is_numeric():
    number = random_card_number()
    assert number.isdigit()
    assert 12 <= len(number) <= 19
