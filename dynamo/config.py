"""Configuration module — frozen dataclass loaded from env vars and CLI args."""

import argparse
import os
from dataclasses import dataclass, fields
from urllib.parse import urlparse

from dynamo.errors import ConfigError

__version__ = "0.1.0"

LOGS_PATH = "/api/v2/logs"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class GeneratorConfig:
    target: str = "http://localhost:8282"
    http_rate: int = 100
    http_error_rate: int = 10
    http_leak_rate: int = 1
    vpc_rate: int = 0
    vpc_attack_rate: int = 0
    batch_size: int = 5
    batch_timeout: float = 5.0
    queue_capacity: int = 32
    request_timeout: float = 10.0
    compress: bool = True
    stats_interval: float = 0.0
    log_level: str = "INFO"

    @property
    def logs_url(self) -> str:
        return self.target.rstrip("/") + LOGS_PATH

    def validate(self) -> "GeneratorConfig":
        """Raise ConfigError on the first invalid field, else return self."""
        for name in ("http_rate", "http_error_rate", "http_leak_rate",
                     "vpc_rate", "vpc_attack_rate"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.batch_size < 1:
            raise ConfigError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.batch_timeout <= 0:
            raise ConfigError(f"batch_timeout must be > 0, got {self.batch_timeout}")
        if self.queue_capacity < 1:
            raise ConfigError(f"queue_capacity must be >= 1, got {self.queue_capacity}")
        if self.request_timeout <= 0:
            raise ConfigError(f"request_timeout must be > 0, got {self.request_timeout}")
        if self.stats_interval < 0:
            raise ConfigError(f"stats_interval must be >= 0, got {self.stats_interval}")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {LOG_LEVELS}, got {self.log_level!r}")

        parsed = urlparse(self.target)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigError(f"target must be an http(s) URL, got {self.target!r}")
        return self


# field name -> (environment variable, CLI flag)
_SOURCES = {
    "target": ("DATADOG_AGENT_TARGET", "--datadog-agent-target"),
    "http_rate": ("HTTP_LOG_RATE_LIMIT_PER_S", "--http-log-rate-limit-per-s"),
    "http_error_rate": (
        "HTTP_LOG_ERROR_RATE_LIMIT_PER_S", "--http-log-error-rate-limit-per-s",
    ),
    "http_leak_rate": (
        "HTTP_LOG_LEAK_RATE_LIMIT_PER_S", "--http-log-leak-rate-limit-per-s",
    ),
    "vpc_rate": ("VPC_LOG_RATE_LIMIT_PER_S", "--vpc-log-rate-limit-per-s"),
    "vpc_attack_rate": (
        "VPC_LOG_ATTACK_RATE_LIMIT_PER_S", "--vpc-log-attack-rate-limit-per-s",
    ),
    "batch_size": ("SENDER_BATCH_SIZE", "--sender-batch-size"),
    "batch_timeout": ("SENDER_BATCH_TIMEOUT_S", "--sender-batch-timeout-s"),
    "queue_capacity": ("QUEUE_CAPACITY", "--queue-capacity"),
    "request_timeout": ("REQUEST_TIMEOUT_S", "--request-timeout-s"),
    "stats_interval": ("STATS_INTERVAL_S", "--stats-interval-s"),
    "log_level": ("LOG_LEVEL", "--log-level"),
}

_HELP = {
    "target": "Vector `datadog_agent` source address to send to.",
    "http_rate": "Rate limit for normal HTTP logs.",
    "http_error_rate": "Rate limit for HTTP error logs.",
    "http_leak_rate": "Rate limit for HTTP logs that leak credit card info.",
    "vpc_rate": "Rate limit for regular VPC flow logs (0 disables).",
    "vpc_attack_rate": "Rate limit for SSH brute force attack VPC logs (0 disables).",
    "batch_size": "Batch size for sending to Vector.",
    "batch_timeout": "Batch timeout in seconds for sending to Vector.",
    "queue_capacity": "Capacity of the shared record queue (backpressure).",
    "request_timeout": "Timeout in seconds for one batch POST.",
    "stats_interval": "Seconds between metrics log lines (0 disables).",
    "log_level": "Logging level for the generator's own output.",
}


def _field_types() -> dict:
    return {f.name: f.type for f in fields(GeneratorConfig)}


def _convert(name: str, raw: str, kind):
    try:
        return kind(raw)
    except ValueError:
        raise ConfigError(f"invalid value for {name}: {raw!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dynamo",
        description="Emit synthetic HTTP and VPC flow logs to a Vector datadog_agent source.",
    )
    types = _field_types()
    for name, (_env, flag) in _SOURCES.items():
        parser.add_argument(
            flag,
            dest=name,
            type=types[name],
            default=None,
            help=_HELP[name],
        )
    parser.add_argument(
        "--no-compress", action="store_true", default=False,
        help="Send uncompressed request bodies.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_config(argv=None) -> GeneratorConfig:
    """Build GeneratorConfig from defaults <- env vars <- CLI args (highest priority).

    Pass argv for testability; when None, argparse reads sys.argv.
    """
    types = _field_types()
    kwargs: dict = {}

    for name, (env, _flag) in _SOURCES.items():
        raw = os.environ.get(env)
        if raw is not None:
            kwargs[name] = _convert(name, raw.strip(), types[name])
    if "COMPRESS" in os.environ:
        kwargs["compress"] = _parse_bool(os.environ["COMPRESS"])

    args = build_parser().parse_args(argv)
    for name in _SOURCES:
        value = getattr(args, name)
        if value is not None:
            kwargs[name] = value
    if args.no_compress:
        kwargs["compress"] = False

    return GeneratorConfig(**kwargs).validate()
