"""Log line formatters: Apache access lines and AWS VPC flow log lines."""

import random
from datetime import datetime, timedelta, timezone

from faker import Faker

ACCESS_TIME_FORMAT = "%d/%b/%Y:%H:%M:%S %z"
HTTP_PROTOCOL = "HTTP/1.1"
DEFAULT_BYTE_COUNT = 1024

FLOW_VERSION = 2
FLOW_ACCOUNT_ID = "1234567890"
FLOW_INTERFACE_ID = "eni-sdvu4NphZxGvp1MDz"
FLOW_PROTOCOL_TCP = 6

_fake = Faker()


def format_access_line(
    method: str,
    status: int,
    *,
    client_ip: str,
    username: str,
    path: str,
    when: datetime,
    byte_count: int = DEFAULT_BYTE_COUNT,
) -> str:
    ts = when.strftime(ACCESS_TIME_FORMAT)
    return (
        f'{client_ip} - {username} [{ts}] "{method} /{path} {HTTP_PROTOCOL}" '
        f"{status} {byte_count}"
    )


def format_flow_line(
    action: str,
    log_status: str,
    dest_port: int,
    *,
    src_ip: str,
    dst_ip: str,
    src_port: int,
    packets: int,
    byte_count: int,
    start: datetime,
    end: datetime,
) -> str:
    """Render a version-2 VPC flow log record (14 space-separated fields)."""
    fields = [
        FLOW_VERSION,
        FLOW_ACCOUNT_ID,
        FLOW_INTERFACE_ID,
        src_ip,
        dst_ip,
        src_port,
        dest_port,
        FLOW_PROTOCOL_TCP,
        packets,
        byte_count,
        int(start.timestamp()),
        int(end.timestamp()),
        action,
        log_status,
    ]
    return " ".join(str(f) for f in fields)


def random_access_line(method: str, status: int, fake: Faker | None = None) -> str:
    fake = fake or _fake
    return format_access_line(
        method,
        status,
        client_ip=fake.ipv4(),
        username=fake.user_name(),
        path=fake.word(),
        when=datetime.now(timezone.utc),
    )


def random_flow_line(action: str, log_status: str, dest_port: int,
                     fake: Faker | None = None, rng: random.Random | None = None) -> str:
    fake = fake or _fake
    rng = rng or random
    end = datetime.now(timezone.utc)
    start = end - timedelta(seconds=rng.randrange(5, 30))
    return format_flow_line(
        action,
        log_status,
        dest_port,
        src_ip=fake.ipv4(),
        dst_ip=fake.ipv4(),
        src_port=rng.randrange(30000, 78000),
        packets=rng.randrange(5, 1000),
        byte_count=rng.randrange(230, 9000),
        start=start,
        end=end,
    )


def random_card_number(fake: Faker | None = None) -> str:
    return (fake or _fake).credit_card_number()
