"""
Session API endpoints.

Exposes the process session state and the actions that move it between
signed-in and signed-out.
"""

from fastapi import APIRouter, Depends, Response

from api.dependencies import get_session_manager
from shared.models import Identity

from .interfaces import ISessionManager
from .models import (
    FederatedSignInRequest,
    NonceResponse,
    PasswordResetRequest,
    RegisterRequest,
    Session,
    SignInRequest,
    UpdateDisplayNameRequest,
    UpdatePasswordRequest,
)

router = APIRouter()


@router.get("", response_model=Session)
async def get_session(
    manager: ISessionManager = Depends(get_session_manager),
) -> Session:
    """Current session snapshot (state plus identity when signed in)."""
    return manager.session


@router.post("/sign-in", response_model=Session)
async def sign_in(
    request: SignInRequest,
    manager: ISessionManager = Depends(get_session_manager),
) -> Session:
    """Sign in with email and password."""
    await manager.sign_in_with_password(request.email, request.password)
    return manager.session


@router.post("/register", response_model=Identity, status_code=201)
async def register(
    request: RegisterRequest,
    manager: ISessionManager = Depends(get_session_manager),
) -> Identity:
    """
    Create an account with email and password.

    Returns the new identity. The session may remain signed out when the
    provider requires email confirmation first.
    """
    return await manager.register_with_password(
        request.email,
        request.password,
        request.confirm_password,
        request.display_name,
    )


@router.post("/federated/nonce", response_model=NonceResponse)
async def begin_federated_sign_in(
    manager: ISessionManager = Depends(get_session_manager),
) -> NonceResponse:
    """
    Issue a nonce for a Google/Apple sign-in.

    The returned value is the SHA-256 digest to embed in the provider's
    authorization request; the raw nonce stays with the session manager.
    """
    challenge = manager.begin_federated_sign_in()
    return NonceResponse(nonce=challenge.hashed_nonce)


@router.post("/federated", response_model=Session)
async def federated_sign_in(
    request: FederatedSignInRequest,
    manager: ISessionManager = Depends(get_session_manager),
) -> Session:
    """Exchange a Google/Apple ID token for a session."""
    await manager.sign_in_with_federated_token(
        request.provider_token,
        provider=request.provider,
        access_token=request.access_token,
    )
    return manager.session


@router.post("/password-reset", status_code=204)
async def request_password_reset(
    request: PasswordResetRequest,
    manager: ISessionManager = Depends(get_session_manager),
) -> Response:
    await manager.request_password_reset(request.email)
    return Response(status_code=204)


@router.post("/sign-out", status_code=204)
async def sign_out(
    manager: ISessionManager = Depends(get_session_manager),
) -> Response:
    """Sign out. Always succeeds locally."""
    await manager.sign_out()
    return Response(status_code=204)


@router.patch("/display-name", response_model=Session)
async def update_display_name(
    request: UpdateDisplayNameRequest,
    manager: ISessionManager = Depends(get_session_manager),
) -> Session:
    await manager.update_display_name(request.display_name)
    return manager.session


@router.post("/password", status_code=204)
async def update_password(
    request: UpdatePasswordRequest,
    manager: ISessionManager = Depends(get_session_manager),
) -> Response:
    await manager.update_password(request.new_password)
    return Response(status_code=204)


@router.delete("/account", status_code=204)
async def delete_account(
    manager: ISessionManager = Depends(get_session_manager),
) -> Response:
    """
    Delete the signed-in user's identity and profile.

    Requires an active session.
    """
    await manager.delete_account()
    return Response(status_code=204)
