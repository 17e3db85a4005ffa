"""
Gemini client library.

Atomic model access shared by the apps: structured JSON, image generation
and chat sessions.
"""

from .errors import (
    AIResponseError,
    ChatError,
    ConfigurationError,
    GatewayError,
    TransportError,
)
from .gemini_client import GeminiClientConfig, GeminiStructuredClient, InlineImage

__all__ = [
    "AIResponseError",
    "ChatError",
    "ConfigurationError",
    "GatewayError",
    "GeminiClientConfig",
    "GeminiStructuredClient",
    "InlineImage",
    "TransportError",
]
