"""Tests for the per-category record producers."""

import re

from dynamo.categories import (
    Category,
    CategoryConfig,
    build_categories,
    normalize,
    produce_http,
    produce_http_leak,
)
from dynamo.config import GeneratorConfig


def test_http_producers_single_record():
    for category, status in ((Category.HTTP, 200), (Category.HTTP_ERROR, 500)):
        record = category.producer()
        assert record["service"] == "storedog"
        assert f'" {status} ' in record["message"]


def test_leak_pair():
    records = Category.HTTP_LEAK.producer()
    assert len(records) == 2
    assert all(r["service"] == "storedog" for r in records)
    assert '"POST /' in records[0]["message"]
    assert " 504 " in records[0]["message"]
    assert re.search(r"could not charge card \d{12,19}!", records[1]["message"])


def test_vpc_producers():
    flow = normalize(Category.VPC_FLOW.producer())
    attack = normalize(Category.VPC_ATTACK.producer())
    assert len(flow) == 1 and len(attack) == 1
    assert flow[0]["service"] == attack[0]["service"] == "aws.vpc_flow_logs"
    assert flow[0]["message"].split(" ")[6] == "443"
    assert flow[0]["message"].endswith("ACCEPT OK")
    assert attack[0]["message"].split(" ")[6] == "22"
    assert attack[0]["message"].endswith("REJECT OK")


def test_producer_takes_service_from_category():
    for category in Category:
        for record in normalize(category.producer()):
            assert record["service"] == category.service


def test_category_static_fields():
    assert Category.HTTP_LEAK.key == "http_leak"
    assert Category.HTTP_LEAK.service == "storedog"
    assert Category.VPC_ATTACK.service == "aws.vpc_flow_logs"
    assert Category.VPC_ATTACK.rate_field == "vpc_attack_rate"
    assert [c.key for c in Category] == [
        "http", "http_error", "http_leak", "vpc_flow", "vpc_attack",
    ]


def test_producer_functions_accept_any_service():
    assert produce_http("checkout")["service"] == "checkout"
    assert all(r["service"] == "checkout" for r in produce_http_leak("checkout"))


def test_normalize():
    assert normalize({"a": 1}) == [{"a": 1}]
    assert normalize([{"a": 1}, {"b": 2}]) == [{"a": 1}, {"b": 2}]


def test_build_categories_defaults():
    names = [c.category for c in build_categories(GeneratorConfig())]
    assert names == [Category.HTTP, Category.HTTP_ERROR, Category.HTTP_LEAK]


def test_build_categories_skips_zero_rates():
    cfg = GeneratorConfig(http_rate=0, http_error_rate=0, http_leak_rate=0, vpc_attack_rate=3)
    enabled = build_categories(cfg)
    assert len(enabled) == 1
    assert enabled[0].category is Category.VPC_ATTACK
    assert enabled[0].rate == 3


def test_category_config_producer_override():
    cc = CategoryConfig(Category.HTTP, rate=1, producer=lambda: {"message": "x"})
    assert cc.producer() == {"message": "x"}
    default = CategoryConfig(Category.HTTP, rate=1)
    assert default.name == "http"
    assert default.producer()["service"] == "storedog"
