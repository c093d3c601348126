"""
Authentication and key storage routes.
"""

import logging

from fastapi import APIRouter, Depends

from ...auth import get_current_username, get_session_authority
from ...exceptions import InvalidRequestError
from ...models import (
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    StoreKeyRequest,
    TokenResponse,
)
from . import get_credential_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log in",
    description="Returns a one-hour bearer token. Creates the user on first login.",
    responses={
        400: {"model": ErrorResponse, "description": "Username missing"},
    },
)
async def login(body: LoginRequest):
    """Issue a token for a username."""
    if not body.username:
        raise InvalidRequestError("Username is required")

    await get_credential_store().get_or_create_user(body.username)

    token = get_session_authority().issue(body.username)
    return TokenResponse(token=token)


@router.post(
    "/store-key",
    response_model=MessageResponse,
    summary="Store a provider API key",
    description="Encrypts and stores an API key for the authenticated user. Replaces any previous key.",
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Invalid or expired token"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def store_key(
    body: StoreKeyRequest,
    username: str = Depends(get_current_username),
):
    """Store an API key for a provider."""
    if not body.service_provider or not body.api_key:
        raise InvalidRequestError("serviceProvider and apiKey are required")

    await get_credential_store().store_key(username, body.service_provider, body.api_key)

    return MessageResponse(message=f"API key for {body.service_provider} stored successfully.")
