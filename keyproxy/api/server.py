"""
FastAPI server for KeyProxy.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..auth import SessionAuthority, set_session_authority
from ..config import ProxyConfig
from ..credentials import CredentialStore, InMemoryCredentialStore, KeyResolver
from ..crypto import KeyCipher
from ..exceptions import InternalError, InvalidRequestError, KeyProxyError, UnsupportedProviderError
from ..gateway import CompletionGateway
from ..models import HealthResponse
from .routes import auth_router, chat_router, set_services

logger = logging.getLogger(__name__)


class ProxyServer:
    """FastAPI server wiring authentication, key storage and the gateway."""

    def __init__(self,
                 config: ProxyConfig,
                 store: Optional[CredentialStore] = None,
                 gateway: Optional[CompletionGateway] = None):
        """Initialize proxy server.

        Args:
            config: Proxy configuration
            store: Credential store (defaults to in-memory)
            gateway: Completion gateway (defaults to OpenAI plus placeholders)

        Raises:
            ConfigurationError: If the encryption key is unusable
        """
        self.config = config

        self.cipher = KeyCipher.from_hex(config.encryption_key, config.allow_legacy_encryption_key)
        self.session_authority = SessionAuthority(config.jwt_secret, config.jwt_expiration_minutes)
        self.store = store or InMemoryCredentialStore(self.cipher)
        self.resolver = KeyResolver(
            store=self.store,
            cipher=self.cipher,
            default_key=config.default_openai_key,
        )
        self.gateway = gateway or CompletionGateway(timeout=config.upstream_timeout)

        set_session_authority(self.session_authority)
        set_services(
            credential_store=self.store,
            key_resolver=self.resolver,
            completion_gateway=self.gateway,
        )

        if config.default_openai_key:
            logger.info(f"Default {self.resolver.default_provider} key configured: {config.default_key_preview}")

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            logger.info("KeyProxy server starting up")
            yield
            await self.gateway.close()
            logger.info("KeyProxy server shutting down")

        self.app = FastAPI(
            title="KeyProxy API",
            description="Per-user AI provider key vault and chat completion proxy",
            version=__version__,
            lifespan=lifespan,
        )

        self._setup_middleware()
        self._setup_routes()
        self._setup_error_handlers()

    def _setup_middleware(self) -> None:
        """Configure FastAPI middleware."""
        cors_origins = self.config.server.cors_origins

        if cors_origins:
            logger.info(f"CORS allowed origins: {cors_origins}")
            self.app.add_middleware(
                CORSMiddleware,
                allow_origins=cors_origins,
                allow_credentials=True,
                allow_methods=["GET", "POST", "OPTIONS"],
                allow_headers=["*"],
            )
        else:
            self.app.add_middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=["GET", "POST", "OPTIONS"],
                allow_headers=["*"],
            )

    def _setup_routes(self) -> None:
        """Configure API routes."""

        @self.app.get("/health", response_model=HealthResponse, tags=["Health"])
        async def health_check():
            """Service status and registered providers."""
            registry = self.gateway.registry
            providers = {}
            for name in registry.names():
                adapter = registry.get(name)
                providers[name] = {
                    "implemented": adapter.implemented,
                    "default_key": name == self.resolver.default_provider and self.resolver.has_default,
                }

            return HealthResponse(
                status="healthy",
                version=__version__,
                server_time=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
                providers=providers,
            )

        self.app.include_router(auth_router, prefix="/auth", tags=["Authentication"])
        self.app.include_router(chat_router, prefix="/api/chat", tags=["Chat"])

    def _setup_error_handlers(self) -> None:
        """Configure error handlers."""

        @self.app.exception_handler(KeyProxyError)
        async def keyproxy_error_handler(request: Request, exc: KeyProxyError):
            if isinstance(exc, UnsupportedProviderError):
                logger.warning(f"{request.method} {request.url.path} rejected: [{exc.error_code}] {exc.message}")
            elif exc.status_code >= 500:
                logger.error(f"{request.method} {request.url.path} failed: {exc.to_log_string()}")
            else:
                logger.info(f"{request.method} {request.url.path} rejected: [{exc.error_code}] {exc.message}")
            return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

        @self.app.exception_handler(RequestValidationError)
        async def validation_error_handler(request: Request, exc: RequestValidationError):
            error = InvalidRequestError(self._describe_validation_error(exc))
            return JSONResponse(status_code=error.status_code, content=error.to_dict())

        @self.app.exception_handler(Exception)
        async def unexpected_error_handler(request: Request, exc: Exception):
            logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
            error = InternalError()
            return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @staticmethod
    def _describe_validation_error(exc: RequestValidationError) -> str:
        errors = exc.errors()
        if not errors:
            return "Invalid request body"
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        if location:
            return f"Invalid request body: {location}: {first.get('msg', 'invalid value')}"
        return f"Invalid request body: {first.get('msg', 'invalid value')}"


def create_app(
    config: ProxyConfig,
    store: Optional[CredentialStore] = None,
    gateway: Optional[CompletionGateway] = None,
) -> FastAPI:
    """Build the FastAPI application for a configuration."""
    return ProxyServer(config, store=store, gateway=gateway).app
