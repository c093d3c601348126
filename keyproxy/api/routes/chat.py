"""
Chat completion proxy routes.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...auth import get_current_username
from ...exceptions import InvalidRequestError, UpstreamError
from ...models import CompletionRequest, ErrorResponse
from . import get_completion_gateway, get_key_resolver

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/completions",
    summary="Proxy a chat completion",
    description=(
        "Resolves the caller's key for the requested provider (falling back to the "
        "shared default where one exists) and returns the provider's response unchanged."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Missing serviceProvider or unsupported provider"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Invalid token or no key configured"},
        500: {"model": ErrorResponse, "description": "Stored key unreadable or upstream failure"},
    },
)
async def completions(
    body: CompletionRequest,
    username: str = Depends(get_current_username),
):
    """Forward a completion request upstream."""
    service_provider = body.service_provider
    if not service_provider:
        raise InvalidRequestError("serviceProvider is required (e.g., openai, google, anthropic)")

    gateway = get_completion_gateway()

    # Reject unknown providers before any key material is touched
    gateway.adapter_for(service_provider)

    resolved = await get_key_resolver().resolve(username, service_provider)

    result = await gateway.handle(service_provider, body, resolved.key)
    if not result.ok:
        raise UpstreamError(result.message, status_code=result.status, service_provider=service_provider)

    return JSONResponse(content=result.payload)
