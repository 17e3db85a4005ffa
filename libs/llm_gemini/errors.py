"""
Gemini gateway error taxonomy.

Callers catch `GatewayError` when they do not care which stage failed.
None of these errors is retried anywhere in the project.
"""


class GatewayError(Exception):
    """Base class for every failure raised while talking to the AI service."""


class ConfigurationError(GatewayError):
    """The credential is missing; no call can proceed."""


class AIResponseError(GatewayError):
    """The service answered without parseable text, or the JSON broke the schema."""


class TransportError(GatewayError):
    """Network or service-side failure."""


class ChatError(GatewayError):
    """A consultation turn could not be sent or answered."""
