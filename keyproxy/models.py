"""
Request/response schemas and internal result types.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Pydantic Schemas (API)
# ============================================================================

# --- Auth ---

class LoginRequest(BaseModel):
    """Login with a username; the user is created on first login."""
    username: Optional[str] = None


class TokenResponse(BaseModel):
    """Signed bearer token."""
    token: str


class StoreKeyRequest(BaseModel):
    """Store a provider API key for the authenticated user."""
    model_config = ConfigDict(populate_by_name=True)

    service_provider: Optional[str] = Field(default=None, alias="serviceProvider")
    api_key: Optional[str] = Field(default=None, alias="apiKey")


class MessageResponse(BaseModel):
    """Plain confirmation message."""
    message: str


# --- Chat ---

class CompletionRequest(BaseModel):
    """Chat completion request.

    Only ``serviceProvider`` is checked; every other field is forwarded to
    the provider exactly as received.
    """
    model_config = ConfigDict(populate_by_name=True)

    service_provider: Optional[str] = Field(default=None, alias="serviceProvider")
    model: Any = None
    messages: Any = None
    temperature: Any = None
    max_tokens: Any = None


# --- Misc ---

class ErrorResponse(BaseModel):
    """Error response."""
    error: str
    code: str


class HealthResponse(BaseModel):
    """Service health."""
    status: str
    version: str
    server_time: str
    providers: Dict[str, Dict[str, bool]]


# ============================================================================
# Data Classes (Internal)
# ============================================================================

@dataclass
class CompletionResult:
    """Outcome of an upstream completion call.

    On success ``payload`` is the provider's JSON exactly as returned. On
    failure ``status`` and ``message`` describe the normalized error.
    """
    ok: bool
    payload: Optional[Any] = None
    status: int = 200
    message: str = ""

    @classmethod
    def success(cls, payload: Any) -> "CompletionResult":
        return cls(ok=True, payload=payload, status=200)

    @classmethod
    def failure(cls, status: int, message: str) -> "CompletionResult":
        return cls(ok=False, payload=None, status=status, message=message)
