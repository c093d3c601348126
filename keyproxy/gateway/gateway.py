"""
Completion gateway: sends a completion request upstream with a resolved key.
"""

import logging
from typing import Optional

import httpx

from ..config.constants import DEFAULT_UPSTREAM_TIMEOUT
from ..models import CompletionRequest, CompletionResult
from .adapters import ProviderAdapter, ProviderRegistry, create_default_registry

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to process request to AI service."


class CompletionGateway:
    """Proxies completion requests to upstream providers.

    One upstream call per request: no retries, no backoff. The only timeout is
    the HTTP client's own.
    """

    def __init__(
        self,
        registry: Optional[ProviderRegistry] = None,
        timeout: float = DEFAULT_UPSTREAM_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize gateway.

        Args:
            registry: Provider adapters (defaults to OpenAI plus placeholders)
            timeout: HTTP client timeout in seconds
            transport: Optional transport override for the HTTP client
        """
        self.registry = registry or create_default_registry()
        self.timeout = timeout
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            kwargs = {"timeout": self.timeout}
            if self._transport is not None:
                kwargs["transport"] = self._transport
            self._http_client = httpx.AsyncClient(**kwargs)
        return self._http_client

    async def close(self):
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    def adapter_for(self, service_provider: str) -> ProviderAdapter:
        """Get the adapter for a provider.

        Raises:
            UnsupportedProviderError: If no implemented adapter is registered
        """
        return self.registry.require(service_provider)

    async def handle(
        self,
        service_provider: str,
        request: CompletionRequest,
        resolved_key: str,
    ) -> CompletionResult:
        """Call the provider and normalize the outcome.

        Args:
            service_provider: Provider name
            request: Completion request from the caller
            resolved_key: Plaintext key to present upstream

        Returns:
            Upstream JSON on success, normalized status/message on failure

        Raises:
            UnsupportedProviderError: If the provider has no adapter
        """
        adapter = self.adapter_for(service_provider)
        client = await self._get_http_client()

        try:
            upstream_request = adapter.build_upstream_request(client, request, resolved_key)
            response = await adapter.call_upstream(client, upstream_request)
        except httpx.HTTPError as e:
            logger.error(f"Error proxying to {service_provider}: {type(e).__name__}: {e}")
            return CompletionResult.failure(500, GENERIC_FAILURE_MESSAGE)

        if not response.is_success:
            return adapter.normalize_error(response)

        try:
            payload = response.json()
        except ValueError:
            logger.error(f"Unparseable success response from {service_provider}")
            return CompletionResult.failure(500, GENERIC_FAILURE_MESSAGE)

        logger.debug(f"Completion from {service_provider} succeeded with status {response.status_code}")
        return CompletionResult.success(payload)
