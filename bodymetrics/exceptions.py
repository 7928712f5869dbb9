"""
Error taxonomy for bodymetrics.

Missing state (an absent CSV file, an absent joint) is never an error and is
treated as "no prior record". Everything else raises one of these.
"""


class BodyMetricsError(Exception):
    """Base exception for all bodymetrics errors."""
    pass


class MalformedStateError(BodyMetricsError):
    """Persisted rows or inbound payloads could not be parsed; aborts the current observation."""
    pass


class CollaboratorUnavailableError(BodyMetricsError):
    """The sensor feed or a downstream consumer went away; fatal for the session."""
    pass


class ConfigurationError(BodyMetricsError):
    """Application configuration error."""
    pass
