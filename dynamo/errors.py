"""Exception hierarchy for the traffic generator."""


class DynamoError(Exception):
    """Base class for all generator errors."""


class ConfigError(DynamoError):
    """Invalid configuration value (fatal at startup)."""


class StartupError(DynamoError):
    """A startup dependency could not be resolved (fatal at startup)."""


class QueueClosed(DynamoError):
    """The fan-in queue was closed; producers and the consumer should stop."""


class DeliveryError(DynamoError):
    """A batch could not be delivered to the collector."""

    def __init__(self, message: str, batch_size: int = 0):
        super().__init__(message)
        self.batch_size = batch_size
