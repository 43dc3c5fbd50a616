"""Record producers, one per log category.

Each category carries its static fields (the service name) and dispatches to
a pure producer that returns either one record or a short list of correlated
records. Producers never touch shared state; they only draw random values.
"""

import enum
import functools
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from dynamo.config import GeneratorConfig
from dynamo.formatters import random_access_line, random_card_number, random_flow_line

logger = logging.getLogger(__name__)

STOREDOG = "storedog"
VPC_FLOW_LOGS = "aws.vpc_flow_logs"


def produce_http(service: str) -> dict:
    return {"message": random_access_line("GET", 200), "service": service}


def produce_http_error(service: str) -> dict:
    return {"message": random_access_line("GET", 500), "service": service}


def produce_http_leak(service: str) -> list[dict]:
    # A failed checkout followed by the line that leaks the card number.
    return [
        {"message": random_access_line("POST", 504), "service": service},
        {
            "message": f"ERROR could not charge card {random_card_number()}!",
            "service": service,
        },
    ]


def produce_vpc_flow(service: str) -> list[dict]:
    return [{"message": random_flow_line("ACCEPT", "OK", 443), "service": service}]


def produce_vpc_attack(service: str) -> dict:
    # SSH brute force: rejected connections to port 22.
    return {"message": random_flow_line("REJECT", "OK", 22), "service": service}


class Category(enum.Enum):
    # key, service, config field holding the rate
    HTTP = ("http", STOREDOG, "http_rate")
    HTTP_ERROR = ("http_error", STOREDOG, "http_error_rate")
    HTTP_LEAK = ("http_leak", STOREDOG, "http_leak_rate")
    VPC_FLOW = ("vpc_flow", VPC_FLOW_LOGS, "vpc_rate")
    VPC_ATTACK = ("vpc_attack", VPC_FLOW_LOGS, "vpc_attack_rate")

    def __init__(self, key: str, service: str, rate_field: str):
        self.key = key
        self.service = service
        self.rate_field = rate_field

    @property
    def producer(self) -> Callable[[], object]:
        """The producer bound to this category's service."""
        return functools.partial(_PRODUCERS[self], self.service)


_PRODUCERS = {
    Category.HTTP: produce_http,
    Category.HTTP_ERROR: produce_http_error,
    Category.HTTP_LEAK: produce_http_leak,
    Category.VPC_FLOW: produce_vpc_flow,
    Category.VPC_ATTACK: produce_vpc_attack,
}


@dataclass(frozen=True)
class CategoryConfig:
    category: Category
    rate: int
    producer: Callable[[], object] | None = None

    def __post_init__(self):
        if self.producer is None:
            object.__setattr__(self, "producer", self.category.producer)

    @property
    def name(self) -> str:
        return self.category.key


def build_categories(config: GeneratorConfig) -> list[CategoryConfig]:
    """Return a CategoryConfig for every category with a non-zero rate."""
    enabled = []
    for category in Category:
        rate = getattr(config, category.rate_field)
        if rate == 0:
            logger.debug("Category %s disabled (rate 0)", category.key)
            continue
        enabled.append(CategoryConfig(category=category, rate=rate))
    return enabled


def normalize(result) -> list:
    """Treat a single record as a one-element list of records."""
    if isinstance(result, Mapping):
        return [result]
    return list(result)
