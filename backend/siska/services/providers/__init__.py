"""
Upstream provider adapters.

Each adapter wraps exactly one external API, decodes its payload with a typed
schema and returns a ProviderResult. Adapters know provider shapes; nothing
outside this package does.
"""

from .base import FailureKind, ProviderClient, ProviderError, ProviderResult

__all__ = ["FailureKind", "ProviderClient", "ProviderError", "ProviderResult"]
