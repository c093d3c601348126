"""
Upstream completion providers.
"""

from .adapters import (
    ProviderAdapter,
    OpenAIAdapter,
    UnimplementedAdapter,
    ProviderRegistry,
    create_default_registry,
)
from .gateway import CompletionGateway, GENERIC_FAILURE_MESSAGE

__all__ = [
    "ProviderAdapter",
    "OpenAIAdapter",
    "UnimplementedAdapter",
    "ProviderRegistry",
    "create_default_registry",
    "CompletionGateway",
    "GENERIC_FAILURE_MESSAGE",
]
