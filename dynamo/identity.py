"""Common metadata attached to every emitted record."""

import logging
import socket
from dataclasses import dataclass

from dynamo.errors import StartupError

logger = logging.getLogger(__name__)

SOURCE = "dynamo"
STATUS = "INFO"
ROUTING_TAGS = "kube_namespace:test"


@dataclass(frozen=True)
class CommonMetadata:
    """Fields the Datadog logs API (as implemented by Vector) expects on
    every message. Built once at startup and shared read-only by all
    generator tasks."""

    hostname: str
    ddsource: str = SOURCE
    status: str = STATUS
    ddtags: str = ROUTING_TAGS

    def as_patch(self) -> dict:
        return {
            "ddsource": self.ddsource,
            "hostname": self.hostname,
            "status": self.status,
            "ddtags": self.ddtags,
        }


def resolve_hostname(gethostname=socket.gethostname) -> str:
    """Return this machine's hostname or raise StartupError."""
    try:
        hostname = gethostname()
    except OSError as exc:
        raise StartupError(f"could not get hostname: {exc}") from exc
    if not hostname:
        raise StartupError("could not get hostname: empty result")
    return hostname


def build_common_metadata(hostname: str | None = None) -> CommonMetadata:
    if hostname is None:
        hostname = resolve_hostname()
    logger.debug("Resolved hostname %s", hostname)
    return CommonMetadata(hostname=hostname)
