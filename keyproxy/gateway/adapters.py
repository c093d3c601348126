"""
Provider adapters.

Each adapter knows how to build the upstream request for one provider, send
it, and turn an upstream failure into a :class:`CompletionResult`. Adding a
provider means registering an adapter.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from ..config.constants import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_OPENAI_MODEL,
    DEFAULT_TEMPERATURE,
    OPENAI_CHAT_COMPLETIONS_URL,
    PLACEHOLDER_PROVIDERS,
)
from ..exceptions import UnsupportedProviderError
from ..models import CompletionRequest, CompletionResult

logger = logging.getLogger(__name__)


class ProviderAdapter(ABC):
    """Abstract base class for upstream provider adapters."""

    name: str = ""
    implemented: bool = True

    def unsupported_error(self) -> UnsupportedProviderError:
        return UnsupportedProviderError(
            self.name,
            f"Service provider {self.name} is not yet implemented",
        )

    @abstractmethod
    def build_upstream_request(
        self,
        client: httpx.AsyncClient,
        request: CompletionRequest,
        api_key: str,
    ) -> httpx.Request:
        """
        Build the HTTP request sent to the provider.

        Args:
            client: Shared HTTP client
            request: Incoming completion request
            api_key: Resolved plaintext key, used only for this call

        Returns:
            Unsent httpx request
        """
        pass

    async def call_upstream(self, client: httpx.AsyncClient, upstream_request: httpx.Request) -> httpx.Response:
        """Send the request. Transport errors propagate to the caller."""
        return await client.send(upstream_request)

    @abstractmethod
    def normalize_error(self, response: httpx.Response) -> CompletionResult:
        """Turn a non-2xx upstream response into a failed result."""
        pass


class OpenAIAdapter(ProviderAdapter):
    """OpenAI chat completions."""

    name = "openai"

    def __init__(self, endpoint: str = OPENAI_CHAT_COMPLETIONS_URL, default_model: str = DEFAULT_OPENAI_MODEL):
        self.endpoint = endpoint
        self.default_model = default_model

    def build_payload(self, request: CompletionRequest) -> Dict[str, Any]:
        """Apply defaults for omitted fields; other values pass through untouched."""
        payload = {
            "model": request.model if request.model is not None else self.default_model,
            "temperature": request.temperature if request.temperature is not None else DEFAULT_TEMPERATURE,
            "max_tokens": request.max_tokens if request.max_tokens is not None else DEFAULT_MAX_TOKENS,
        }
        if request.messages is not None:
            payload["messages"] = request.messages
        return payload

    def build_upstream_request(
        self,
        client: httpx.AsyncClient,
        request: CompletionRequest,
        api_key: str,
    ) -> httpx.Request:
        return client.build_request(
            "POST",
            self.endpoint,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
            json=self.build_payload(request),
        )

    def normalize_error(self, response: httpx.Response) -> CompletionResult:
        try:
            body = response.json()
        except ValueError:
            body = None

        if body is None:
            message = "Unknown error from OpenAI API"
        else:
            message = self._extract_message(body)

        logger.error(f"OpenAI API error: status={response.status_code}, message={message}")
        return CompletionResult.failure(response.status_code, message)

    @staticmethod
    def _extract_message(body: Any) -> str:
        """Pull the most specific error message out of an OpenAI error body."""
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        return "Failed to fetch from OpenAI API"


class UnimplementedAdapter(ProviderAdapter):
    """Placeholder for a provider that is known but not wired up."""

    implemented = False

    def __init__(self, name: str):
        self.name = name

    def build_upstream_request(self, client, request, api_key):
        raise self.unsupported_error()

    async def call_upstream(self, client, upstream_request):
        raise self.unsupported_error()

    def normalize_error(self, response):
        raise self.unsupported_error()


class ProviderRegistry:
    """Maps provider names to adapters."""

    def __init__(self):
        self._adapters: Dict[str, ProviderAdapter] = {}

    def register(self, adapter: ProviderAdapter) -> None:
        self._adapters[adapter.name] = adapter
        logger.debug(f"Registered provider adapter: {adapter.name}")

    def get(self, name: str) -> Optional[ProviderAdapter]:
        return self._adapters.get(name)

    def names(self) -> List[str]:
        return sorted(self._adapters)

    def require(self, name: str) -> ProviderAdapter:
        """
        Get an implemented adapter.

        Raises:
            UnsupportedProviderError: If the provider is unknown or a placeholder
        """
        adapter = self._adapters.get(name)
        if adapter is None:
            raise UnsupportedProviderError(name)
        if not adapter.implemented:
            raise adapter.unsupported_error()
        return adapter


def create_default_registry() -> ProviderRegistry:
    """Registry with the OpenAI adapter and the placeholder providers."""
    registry = ProviderRegistry()
    registry.register(OpenAIAdapter())
    for name in PLACEHOLDER_PROVIDERS:
        registry.register(UnimplementedAdapter(name))
    return registry
